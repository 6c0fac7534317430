from __future__ import annotations

"""Persist pipeline outputs.

Outputs are laid out under `output_dir` relative to the deepest directory
holding every file and every file's base. Usually that is the shared base, so
`dist/app.js` lands at `<out>/app.js`. A map written outside the base
(`--maps ../maps`) moves the root up one level, and the relative
`sourceMappingURL` between the file and its map stays valid on disk.
"""

import os
import sys
from pathlib import Path

from .errors import UnsafePathError
from .paths import relative_path, resolve_path, safe_join, unix_style_path
from .types import VirtualFile


def layout_root(files: list[VirtualFile]) -> str | None:
    dirs = []
    for entry in files:
        dirs.append(resolve_path(entry.base))
        dirs.append(os.path.dirname(resolve_path(entry.path)))
    if not dirs:
        return None
    return os.path.commonpath(dirs)


def plan_layout(files: list[VirtualFile]) -> list[tuple[VirtualFile, str]]:
    """Pair each buffered file with its path under the output directory."""

    root = layout_root(files)
    return [
        (entry, unix_style_path(relative_path(root, entry.path)))
        for entry in files
        if entry.is_buffer()
    ]


def write_files(files: list[VirtualFile], output_dir: Path, *, verbose: bool = False) -> int:
    """Write buffered files under `output_dir`.

    Returns the number of files written. Files that cannot be written are
    reported on stderr.
    """

    written = 0

    for entry, relative in plan_layout(files):
        try:
            out_path = safe_join(output_dir, relative)
        except UnsafePathError as e:
            print(f"  SKIP: {relative} ({e})", file=sys.stderr)
            continue

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(bytes(entry.contents))
            written += 1
            if verbose:
                print(f"  {out_path.relative_to(output_dir)} ({len(entry.contents)} bytes)")
        except OSError as e:
            print(f"  FAILED: {relative} - {e}", file=sys.stderr)

    return written
