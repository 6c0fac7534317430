from __future__ import annotations

"""Path normalization and safe filesystem joins.

Source maps store forward-slash paths regardless of the host OS, and their
`sources` may be remote URLs (`https://`, `webpack://`) that must never be
resolved against the local filesystem.

This module provides:
- `unix_style_path()` and the resolve/relative helpers used by the pipelines.
- A `safe_join()` helper that prevents directory traversal when writing outputs.
"""

import os
import posixpath
import re
from pathlib import Path

from .errors import UnsafePathError

_REMOTE_SOURCE = re.compile(r"^(https?|webpack(-[^:]+)?)://")


def is_remote_source(source: str) -> bool:
    return bool(_REMOTE_SOURCE.match(source))


def unix_style_path(path: str) -> str:
    """Convert separators to '/', collapse repeats and drop a trailing slash.

    Remote URLs are returned untouched.
    """

    if is_remote_source(path):
        return path
    if len(path) <= 1:
        return "/" if path == "\\" else path

    segments = re.split(r"[\\/]+", path)
    if segments[-1] == "":
        segments.pop()
    if segments == [""]:
        return "/"
    return "/".join(segments)


def resolve_path(*parts: str) -> str:
    """Resolve path segments right to left into an absolute path."""

    return os.path.abspath(os.path.join(*parts)) if parts else os.getcwd()


def relative_path(from_path: str, to_path: str) -> str:
    """Relative path from `from_path` to `to_path`; '' when they are the same."""

    from_abs = resolve_path(from_path)
    to_abs = resolve_path(to_path)
    if from_abs == to_abs:
        return ""
    return os.path.relpath(to_abs, from_abs)


def join_posix(*parts: str) -> str:
    """Join and normalize forward-slash path segments ('.' for an empty result)."""

    return posixpath.normpath(posixpath.join(*parts))


_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def normalize_relative_path(path: str) -> str:
    """Normalize a path meant to live under an output directory.

    Raises UnsafePathError for empty or absolute paths and for paths that
    climb above their root.
    """

    posix = path.replace("\\", "/")
    if posix.startswith("/") or _DRIVE_PREFIX.match(posix):
        raise UnsafePathError(f"Absolute path not allowed here: {path!r}")

    normalized = posixpath.normpath(posix) if posix else "."
    if normalized == ".":
        raise UnsafePathError(f"Empty path: {path!r}")
    if normalized == ".." or normalized.startswith("../"):
        raise UnsafePathError(f"Path climbs above the output directory: {path!r}")
    return normalized


def safe_join(base: Path, relative: str) -> Path:
    """Join `relative` under `base`, refusing anything that resolves outside it."""

    joined = base.joinpath(*normalize_relative_path(relative).split("/"))
    if not joined.resolve(strict=False).is_relative_to(base.resolve(strict=False)):
        raise UnsafePathError(f"Path escapes output directory: {relative!r}")
    return joined
