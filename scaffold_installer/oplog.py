from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

from .errors import CriticalStop
from .state import RunState

logger = logging.getLogger(__name__)


MACROS = {
    "[LN]": lambda: "\n",
    "[NL]": lambda: "\n",
    "[currDir]": os.getcwd,
    "[cwd]": os.getcwd,
}


class OperationLog:
    """Human-readable narrative of an installation run.

    Every operation writes a start fragment with `begin()` and closes the
    line with `succeed()`, `line(...)` or `fail_with(...)`. The text is kept
    in the shared RunState and, while echo is enabled, written to `stream`
    as it is produced.
    """

    def __init__(self, state: RunState, stream: Optional[TextIO] = None) -> None:
        self.state = state
        self._stream = stream
        self._pending = ""

    def enable_echo(self) -> None:
        self.state.echo_enabled = True

    def disable_echo(self) -> None:
        self.state.echo_enabled = False

    def is_echo_enabled(self) -> bool:
        return self.state.echo_enabled

    def get_log(self) -> str:
        return self.state.log_text()

    def _replace(self, text: str) -> str:
        for macro, value in MACROS.items():
            if macro in text:
                text = text.replace(macro, value())
        return text

    def _append(self, text: str) -> None:
        self.state.log.append(text)

        if self.state.echo_enabled:
            stream = self._stream or sys.stdout
            stream.write(text)
            stream.flush()

        # Mirror finished lines into diagnostic logging.
        self._pending += text
        if "\n" in self._pending:
            *done, self._pending = self._pending.split("\n")
            for ln in done:
                if ln.strip():
                    logger.debug("%s", ln.strip())

    def begin(self, text: str) -> None:
        self._append(self._replace(text))

    def line(self, text: str) -> None:
        self._append(self._replace(text) + "\n")

    def succeed(self) -> None:
        self.line("succeeded")

    def fail_with(self, error: BaseException, operation: Optional[str] = None) -> None:
        """Record a failed operation and apply the critical stop policy.

        Raises CriticalStop when critical stop is enabled; otherwise returns
        and the run goes on.
        """

        message = str(error)
        self.line(f"failed, cause {message} !")
        self.state.errors.append(
            {"operation": operation or "", "error_type": type(error).__name__, "error": message}
        )

        if not self.state.critical_stop_enabled:
            logger.warning("Operation failed (continuing): %s", message)
            return

        self.line("[NL]CRITICAL STOP[NL][NL]")
        logger.error("Critical stop: %s", message)
        raise CriticalStop(error) from error
