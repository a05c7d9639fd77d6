from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Literal

from ..errors import ConflictError, NotFoundError
from .paths import as_dir

logger = logging.getLogger(__name__)


EntryKind = Literal["file", "dir"]


@dataclass(frozen=True)
class TreeEntry:
    # Directories keep a trailing slash, files do not.
    path: str
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind == "dir"


def iter_tree(root: str) -> Iterator[TreeEntry]:
    """Yield every descendant of root, depth-first, pre-order.

    The root itself is never yielded. Siblings come in name order.
    Symbolic links are rejected rather than followed.
    """

    base = as_dir(root)
    p = Path(base)
    if not p.exists():
        raise NotFoundError(f"dir `{base}` does not exist")
    if not p.is_dir():
        raise ConflictError(f"path `{base}` is not a dir")

    for child in sorted(p.iterdir(), key=lambda c: c.name):
        child_path = base + child.name
        if child.is_symlink():
            raise ConflictError(f"path `{child_path}` is a symlink, which is not supported")
        if child.is_dir():
            yield TreeEntry(path=child_path + "/", kind="dir")
            yield from iter_tree(child_path)
        else:
            yield TreeEntry(path=child_path, kind="file")


def walk(root: str) -> List[TreeEntry]:
    entries = list(iter_tree(root))
    logger.debug("Walked %s (%d entries)", root, len(entries))
    return entries
