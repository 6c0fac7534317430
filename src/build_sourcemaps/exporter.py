from __future__ import annotations

"""Source map emission.

Finalizes the `SourceMap` carried by a `VirtualFile` and decides where it
lives in the output: inline as a base64 `data:` URL, or, when a destination
directory is given, as a separate `.map` file returned next to the source
file. Either way a `sourceMappingURL` comment is appended for `.js`-like and
`.css` files.
"""

import logging
import os
from dataclasses import dataclass

from .comments import detect_newline, format_comment, serialize_map, to_data_url
from .errors import (
    PLUGIN_NAME,
    InvalidOptionsError,
    NoSourceMapFoundError,
    NotVinylFileError,
    StreamingNotSupportedError,
)
from .fs import FileSystem
from .paths import is_remote_source, join_posix, relative_path, resolve_path, unix_style_path
from .runner import ReadBatch, run_steps, run_steps_sync
from .types import CommentStyle, FileStat, SourceMap, VirtualFile, WriteOptions

logger = logging.getLogger(__name__)


@dataclass
class ExportState:
    dest_dir: str | None
    source_map: SourceMap
    map_file: VirtualFile | None = None


def prepare_map(file: VirtualFile, state: ExportState, options: WriteOptions) -> None:
    source_map = state.source_map
    source_map.file = unix_style_path(file.relative)

    if options.map_sources is not None:
        source_map.sources = [options.map_sources(source) for source in source_map.sources]
    source_map.sources = [unix_style_path(source) for source in source_map.sources]

    # None leaves sourceRoot unset; "" is kept and rebased later.
    source_map.source_root = options.source_root


def include_content(file: VirtualFile, state: ExportState, options: WriteOptions) -> ReadBatch:
    source_map = state.source_map
    if not options.include_content:
        source_map.sources_content = None
        return

    contents = list(source_map.sources_content or [])
    source_root = source_map.source_root
    if source_root and is_remote_source(source_root):
        source_map.sources_content = contents
        return
    base_path = resolve_path(file.base, source_root) if source_root else file.base

    pending: list[tuple[int, str]] = []
    for idx, source in enumerate(source_map.sources):
        if idx < len(contents) and contents[idx]:
            continue
        if is_remote_source(source):
            continue
        if options.debug:
            logger.info('%s: No source content for "%s". Loading from file.', PLUGIN_NAME, source)
        pending.append((idx, resolve_path(base_path, source)))

    if pending:
        texts = yield [abs_path for _, abs_path in pending]
        for (idx, abs_path), text in zip(pending, texts):
            if text is None:
                if options.debug:
                    logger.warning("%s: source file not found: %s", PLUGIN_NAME, abs_path)
                continue
            if idx >= len(contents):
                contents.extend([None] * (idx + 1 - len(contents)))
            contents[idx] = text

    source_map.sources_content = contents


def _rebase_source_root(source_root: str | None, map_dir: str, base: str) -> str | None:
    if source_root == "" or (source_root and source_root.startswith(".")):
        return unix_style_path(join_posix(unix_style_path(relative_path(map_dir, base)), source_root))
    return source_root


def externalize_map(file: VirtualFile, state: ExportState, options: WriteOptions) -> str:
    """Build the `.map` artifact and return the URL the comment should carry."""

    source_map = state.source_map

    map_file = os.path.join(state.dest_dir, file.relative) + ".map"
    if options.map_file is not None:
        map_file = options.map_file(map_file)
    source_map_path = resolve_path(file.base, map_file)

    if options.dest_path:
        dest_map_path = resolve_path(file.cwd, options.dest_path, map_file)
        dest_file_path = resolve_path(file.cwd, options.dest_path, file.relative)
        map_dir = os.path.dirname(dest_map_path)
        source_map.file = unix_style_path(relative_path(map_dir, dest_file_path))
        if source_map.source_root is None:
            source_map.source_root = unix_style_path(relative_path(map_dir, file.base))
        else:
            source_map.source_root = _rebase_source_root(source_map.source_root, map_dir, file.base)
    else:
        # best effort, can be wrong when the file is written somewhere else
        map_dir = os.path.dirname(source_map_path)
        source_map.file = unix_style_path(relative_path(map_dir, file.path))
        source_map.source_root = _rebase_source_root(source_map.source_root, map_dir, file.base)

    state.map_file = VirtualFile(
        cwd=file.cwd,
        base=file.base,
        path=source_map_path,
        contents=serialize_map(source_map).encode("utf-8"),
        stat=FileStat.regular(),
    )

    if options.source_mapping_url:
        return options.source_mapping_url

    url = unix_style_path(relative_path(file.dirname, source_map_path))
    if options.source_mapping_url_prefix:
        url = options.source_mapping_url_prefix + join_posix("/", url)
    return url


def append_comment(file: VirtualFile, state: ExportState, options: WriteOptions) -> None:
    if state.dest_dir is None:
        url = to_data_url(state.source_map, options.charset)
    else:
        url = externalize_map(file, state, options)

    if not options.add_comment:
        return

    style = CommentStyle.for_extension(file.extname)
    comment = format_comment(style, url, detect_newline(file.text))
    if comment:
        file.contents = bytes(file.contents) + comment.encode("utf-8")


EXPORT_STEPS = (
    prepare_map,
    include_content,
    append_comment,
)


def _begin(
    file: object, dest_dir: str | None, options: object, operation: str
) -> tuple[ExportState | None, WriteOptions]:
    if options is None:
        options = WriteOptions()
    elif not isinstance(options, WriteOptions):
        raise InvalidOptionsError(f"{PLUGIN_NAME}-{operation}: Invalid argument: options")

    if dest_dir is not None and not isinstance(dest_dir, str):
        raise InvalidOptionsError(f"{PLUGIN_NAME}-{operation}: Invalid argument: dest_dir")

    if not isinstance(file, VirtualFile):
        raise NotVinylFileError(f"{PLUGIN_NAME}-{operation}: Not a vinyl file")

    if file.source_map is None:
        raise NoSourceMapFoundError(f"{PLUGIN_NAME}-{operation}: No sourcemap found")

    if file.is_stream():
        raise StreamingNotSupportedError(f"{PLUGIN_NAME}-{operation}: Streaming not supported")

    if file.is_null():
        return None, options

    return ExportState(dest_dir=dest_dir, source_map=file.source_map), options


def _results(file: VirtualFile, state: ExportState | None) -> list[VirtualFile]:
    if state is None or state.map_file is None:
        return [file]
    return [file, state.map_file]


async def embed_source_map(
    file: VirtualFile,
    dest_dir: str | None = None,
    options: WriteOptions | None = None,
    fs: FileSystem | None = None,
) -> list[VirtualFile]:
    """Embed or externalize the source map of `file`.

    Returns `[file]`, or `[file, map_file]` when `dest_dir` is given.
    """

    state, options = _begin(file, dest_dir, options, "write")
    if state is not None:
        await run_steps(EXPORT_STEPS, fs or FileSystem(), file, state, options)
    return _results(file, state)


def embed_source_map_sync(
    file: VirtualFile,
    dest_dir: str | None = None,
    options: WriteOptions | None = None,
    fs: FileSystem | None = None,
) -> list[VirtualFile]:
    state, options = _begin(file, dest_dir, options, "writeSync")
    if state is not None:
        run_steps_sync(EXPORT_STEPS, fs or FileSystem(), file, state, options)
    return _results(file, state)
