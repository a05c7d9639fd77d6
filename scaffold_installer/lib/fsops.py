from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Union

from ..errors import ConflictError, InstallerError, NotFoundError
from .paths import as_dir, normalize
from .walk import walk

logger = logging.getLogger(__name__)


Contents = Union[str, bytes]


def write_file(p: Path, contents: Contents) -> None:
    if isinstance(contents, bytes):
        p.write_bytes(contents)
    else:
        p.write_text(contents, encoding="utf-8")


def make_dir_chain(directory: str) -> bool:
    """Create every missing directory along the path, shallow to deep.

    Returns True if at least one directory was created.
    """

    if not directory:
        raise InstallerError("dir may not be empty")

    created = False
    current = ""
    for i, part in enumerate(normalize(directory).split("/")):
        current = part if i == 0 else f"{current}/{part}"
        if not current:
            # Leading "/" of an absolute path.
            continue

        p = Path(current)
        if p.exists() and not p.is_dir():
            raise ConflictError(f"path `{current}` already exists and is not a dir")
        if not p.exists():
            p.mkdir()
            created = True
            logger.debug("Created dir %s", current)

    return created


def empty_tree(directory: str) -> None:
    """Delete everything below directory, leaving directory itself in place."""

    entries = walk(directory)

    # Reverse pre-order puts children before the directory holding them.
    for entry in reversed(entries):
        p = Path(entry.path)
        if entry.is_dir:
            p.rmdir()
        else:
            p.unlink()

    logger.debug("Emptied %s (%d entries removed)", directory, len(entries))


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def copy_tree(source: str, destination: str) -> None:
    """Make destination an exact mirror of source.

    Source is listed before destination is created or emptied, so a source
    that cannot be walked leaves destination as it was. Repeated runs never
    merge.
    """

    src = as_dir(source)
    dst = as_dir(destination)

    s = Path(src)
    if not s.exists():
        raise NotFoundError("source dir not found or is not a dir")
    if not s.is_dir():
        raise ConflictError("source dir not found or is not a dir")

    # Listed before destination is touched, so a rejected source leaves it intact.
    # A destination nested in source is left out of its own listing.
    dst_real = os.path.realpath(dst)
    entries = [
        e for e in walk(src)
        if not _is_within(os.path.realpath(e.path), dst_real)
    ]

    if Path(dst).exists():
        empty_tree(dst)
    else:
        make_dir_chain(dst)

    for entry in entries:
        out = Path(dst + entry.path[len(src):])
        if entry.is_dir:
            out.mkdir()
        else:
            shutil.copy2(entry.path, out)

    logger.debug("Copied tree %s -> %s (%d entries)", src, dst, len(entries))


def write_file_if_exists(path: str, contents: Contents) -> bool:
    """Overwrite an existing file. Returns False when there is nothing to overwrite."""

    p = Path(path)
    if not p.exists():
        return False
    if not p.is_file():
        raise ConflictError("it is not a file under given uri")

    write_file(p, contents)
    return True


def write_file_if_absent(path: str, contents: Contents) -> bool:
    """Create a new file. Returns False when anything already occupies path."""

    p = Path(path)
    if p.exists():
        return False

    write_file(p, contents)
    return True
