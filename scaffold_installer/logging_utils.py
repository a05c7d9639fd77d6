from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_NAME = "scaffold-installer.log"


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = False,
) -> Optional[str]:
    """Configure diagnostic logging for an installation run.

    The operation log is echoed to stdout by the installer itself, so the
    console handler is off by default.

    Notes:
    - If `log_path` cannot be opened (read-only project dir, missing
      permissions), the log falls back to a file in the working directory.
    - Repeated calls are no-ops and return the path chosen the first time.

    Returns the actual file path being used, or None when no file was requested.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, "_scaffold_configured", False):
        return getattr(root, "_scaffold_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path:
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler: logging.Handler = logging.FileHandler(log_path)
        except OSError:
            chosen_path = str(Path.cwd() / DEFAULT_LOG_NAME)
            file_handler = logging.FileHandler(chosen_path)
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, "_scaffold_configured", True)
    setattr(root, "_scaffold_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
