from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import CorruptError, NotFoundError

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # composer.json and anything unknown are read as JSON.
    return "json"


def load_document(path: str, *, not_found: str = "file not found or uri leads not to a file") -> Dict[str, Any]:
    """Read a JSON or YAML mapping, chosen by file extension.

    Missing files raise NotFoundError(not_found). Unparsable, empty or
    non-mapping documents raise CorruptError("file corrupted").
    """

    p = Path(path)
    if not p.exists() or not p.is_file():
        raise NotFoundError(not_found)

    try:
        text = p.read_text(encoding="utf-8")
        if _detect_format(p) == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        logger.debug("Failed to parse %s: %s", path, e)
        raise CorruptError("file corrupted") from e

    if not data or not isinstance(data, dict):
        raise CorruptError("file corrupted")

    return data


def save_document(path: str, data: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
