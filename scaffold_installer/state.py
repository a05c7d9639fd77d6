from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .lib.documents import save_document

logger = logging.getLogger(__name__)


@dataclass
class RunState:
    """Mutable state of one provisioning run.

    Shared by reference between an Installer and its OperationLog.
    `log` is append-only for the lifetime of the run.
    """

    critical_stop_enabled: bool = True
    echo_enabled: bool = True
    log: List[str] = field(default_factory=list)
    user_inputs: Dict[str, str] = field(default_factory=dict)
    errors: List[Dict[str, str]] = field(default_factory=list)
    completed: bool = False

    def log_text(self) -> str:
        return "".join(self.log)

    def to_report(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "critical_stop_enabled": self.critical_stop_enabled,
            "errors": [dict(e) for e in self.errors],
            "log": self.log_text(),
            "user_inputs": dict(self.user_inputs),
        }


def save_report(path: str, state: RunState) -> None:
    """Persist the run report as JSON or YAML depending on the extension."""
    save_document(path, state.to_report())
    logger.info("Run report written to %s", path)
