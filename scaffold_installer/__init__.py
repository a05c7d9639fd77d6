"""Scaffold installer: provisions project files from vendor apps.

Core design goals:
- Idempotent filesystem operations (make, mirror, conditional write, empty)
- Vendor source roots resolved through a composer manifest
- A replayable operation log with a start/succeed/fail line per action
- Critical stop: first failure aborts the run unless disabled
"""

from .errors import (
    ConfigurationError,
    ConflictError,
    CorruptError,
    CriticalStop,
    InstallerError,
    NotConfiguredError,
    NotFoundError,
    TransformError,
)
from .installer import Installer, OpResult
from .oplog import OperationLog
from .state import RunState

__all__ = [
    "ConfigurationError",
    "ConflictError",
    "CorruptError",
    "CriticalStop",
    "Installer",
    "InstallerError",
    "NotConfiguredError",
    "NotFoundError",
    "OpResult",
    "OperationLog",
    "RunState",
    "TransformError",
]
