from __future__ import annotations


def normalize(path: str) -> str:
    """Use forward slashes and drop trailing separators."""
    return path.replace("\\", "/").rstrip("/")


def as_dir(path: str) -> str:
    """Normalized path terminated with exactly one slash."""
    return normalize(path) + "/"
