from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import CorruptError, NotConfiguredError, NotFoundError
from .lib.documents import load_document

logger = logging.getLogger(__name__)


NAMESPACE_SEPARATOR = "\\"


@dataclass(frozen=True)
class VendorManifest:
    """The `autoload."psr-4"` part of a composer manifest.

    Maps a namespace key (always ending with a backslash) to a source root.
    """

    path: str
    psr4: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str:
        return self.psr4.get(key) or ""


def _psr4_roots(raw: Dict[str, Any]) -> Dict[str, str]:
    autoload = raw.get("autoload")
    if autoload is None:
        return {}
    if not isinstance(autoload, dict):
        raise CorruptError("file corrupted")

    psr4 = autoload.get("psr-4")
    if psr4 is None:
        return {}
    if not isinstance(psr4, dict):
        raise CorruptError("file corrupted")

    roots: Dict[str, str] = {}
    for key, value in psr4.items():
        # Composer allows a list of roots per namespace; the first one wins.
        if isinstance(value, list):
            value = value[0] if value else ""
        if not isinstance(key, str) or not isinstance(value, str):
            raise CorruptError("file corrupted")
        roots[key] = value
    return roots


def load_manifest(path: str) -> VendorManifest:
    raw = load_document(path, not_found="composer file not found or uri leads not to a file")
    manifest = VendorManifest(path=path, psr4=_psr4_roots(raw))
    logger.debug("Loaded manifest %s with %d namespaces", path, len(manifest.psr4))
    return manifest


def resolve(manifest: Optional[VendorManifest], vendor_app: str) -> str:
    """Source root registered for a vendor-app key such as ``Vendor\\App``."""

    if manifest is None:
        raise NotConfiguredError("composer not defined, use `set_composer(...)`")

    key = vendor_app.rstrip(NAMESPACE_SEPARATOR) + NAMESPACE_SEPARATOR
    root = manifest.get(key)
    if not root:
        raise NotFoundError("app not found in composer")
    return root
