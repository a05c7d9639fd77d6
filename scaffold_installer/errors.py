from __future__ import annotations

from typing import Optional


class InstallerError(Exception):
    """Base for every recoverable failure of a single installer operation."""


class NotFoundError(InstallerError):
    pass


class ConflictError(InstallerError):
    """A path exists but is the wrong kind of node."""


class CorruptError(InstallerError):
    pass


class ConfigurationError(InstallerError):
    """An operation was invoked before its prerequisite setup."""


class NotConfiguredError(ConfigurationError):
    pass


class TransformError(InstallerError):
    pass


class CriticalStop(Exception):
    """Terminal abort of a whole provisioning run.

    Raised only when critical stop is enabled and an operation failed.
    Top-level callers catch it and treat the installation as incomplete.
    """

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__("Critical stop")
        self.cause = cause
