from __future__ import annotations

"""Source map discovery.

Attaches a normalized `SourceMap` to a `VirtualFile`. With `load_maps` the
file is searched for an inline map, then for a comment pointing at an
external `.map` file, then for a same-named `<file>.map`. Whatever is found
has its `sources` rewritten relative to the file's base and any missing
`sourcesContent` filled from disk. Without a usable map, an identity map (if
requested and a generator is available) or an empty map is attached.

Only a bad argument or streaming contents raise; read and parse failures
degrade to "no map" or a None content entry.
"""

import json
import logging
import os
from dataclasses import dataclass

from .comments import (
    decode_inline_map,
    find_inline_map,
    find_map_file_reference,
    remove_inline_comments,
    remove_map_file_comments,
)
from .errors import PLUGIN_NAME, InvalidOptionsError, NotVinylFileError, StreamingNotSupportedError
from .fs import FileSystem
from .paths import is_remote_source, relative_path, resolve_path, unix_style_path
from .runner import ReadBatch, run_steps, run_steps_sync
from .types import AddOptions, SourceMap, VirtualFile

logger = logging.getLogger(__name__)


@dataclass
class ImportState:
    content: str
    # Directory that relative `sources` entries are resolved against.
    path: str = ""
    map: SourceMap | None = None


def load_source_map(file: VirtualFile, state: ImportState, options: AddOptions) -> ReadBatch:
    if not options.load_maps:
        return

    match = find_inline_map(state.content)
    if match is not None:
        state.path = file.dirname
        state.content = remove_inline_comments(state.content)
        file.text = state.content
        try:
            state.map = SourceMap.from_dict(decode_inline_map(match))
        except ValueError as e:
            if options.debug:
                logger.warning("%s: invalid inline source map in %s: %s", PLUGIN_NAME, file.path, e)
        return

    reference = find_map_file_reference(state.content)
    if reference:
        map_path = resolve_path(file.dirname, reference)
        state.content = remove_map_file_comments(state.content)
        file.text = state.content
    else:
        map_path = file.path + ".map"

    # sources in an external map are relative to the map file
    state.path = os.path.dirname(map_path)

    (text,) = yield [map_path]
    if text is None:
        if options.debug:
            logger.warning("%s: source map file not found: %s", PLUGIN_NAME, map_path)
        return

    try:
        state.map = SourceMap.from_dict(json.loads(text))
    except ValueError as e:
        if options.debug:
            logger.warning("%s: invalid source map file %s: %s", PLUGIN_NAME, map_path, e)


def normalize_sources(file: VirtualFile, state: ImportState, options: AddOptions) -> ReadBatch:
    source_map = state.map
    if source_map is None:
        return

    sources = source_map.sources
    contents = list(source_map.sources_content or [])[: len(sources)]
    contents.extend([None] * (len(sources) - len(contents)))

    source_root = source_map.source_root or ""
    remote_root = bool(source_root) and is_remote_source(source_root)
    base_path = resolve_path(file.base, source_root)
    file_path = resolve_path(file.path)

    pending: list[tuple[int, str]] = []
    for idx, source in enumerate(sources):
        if remote_root or is_remote_source(source):
            contents[idx] = contents[idx] or None
            continue

        abs_path = resolve_path(state.path, source_root, unix_style_path(source))
        sources[idx] = unix_style_path(relative_path(base_path, abs_path))

        if contents[idx]:
            continue
        if abs_path == file_path:
            contents[idx] = state.content
            continue

        if options.debug:
            logger.info('%s: No source content for "%s". Loading from file.', PLUGIN_NAME, source)
        pending.append((idx, abs_path))

    if pending:
        texts = yield [abs_path for _, abs_path in pending]
        for (idx, abs_path), text in zip(pending, texts):
            if text is None and options.debug:
                logger.warning("%s: source file not found: %s", PLUGIN_NAME, abs_path)
            contents[idx] = text

    source_map.sources_content = contents


def generate_identity_map(file: VirtualFile, state: ImportState, options: AddOptions) -> None:
    if state.map is not None or not options.identity_map:
        return

    generator = options.identity_map_generator
    if generator is None or not generator.supports(file.extname):
        return

    state.map = SourceMap.from_dict(generator.generate(unix_style_path(file.relative), state.content))
    state.map.sources_content = [state.content]


def attach_source_map(file: VirtualFile, state: ImportState, options: AddOptions) -> None:
    relative = unix_style_path(file.relative)
    if state.map is None:
        state.map = SourceMap(
            version=3,
            names=[],
            mappings="",
            sources=[relative],
            sources_content=[state.content],
        )

    state.map.file = relative
    file.source_map = state.map


IMPORT_STEPS = (
    load_source_map,
    normalize_sources,
    generate_identity_map,
    attach_source_map,
)


def _begin(file: object, options: object, operation: str) -> tuple[ImportState | None, AddOptions]:
    if options is None:
        options = AddOptions()
    elif not isinstance(options, AddOptions):
        raise InvalidOptionsError(f"{PLUGIN_NAME}-{operation}: Invalid argument: options")

    if not isinstance(file, VirtualFile):
        raise NotVinylFileError(f"{PLUGIN_NAME}-{operation}: Not a vinyl file")

    if file.source_map is not None or file.is_null():
        return None, options

    if file.is_stream():
        raise StreamingNotSupportedError(f"{PLUGIN_NAME}-{operation}: Streaming not supported")

    return ImportState(content=file.text), options


async def discover_source_map(
    file: VirtualFile, options: AddOptions | None = None, fs: FileSystem | None = None
) -> VirtualFile:
    """Attach a source map to `file`, reading from disk concurrently."""

    state, options = _begin(file, options, "add")
    if state is not None:
        await run_steps(IMPORT_STEPS, fs or FileSystem(), file, state, options)
    return file


def discover_source_map_sync(
    file: VirtualFile, options: AddOptions | None = None, fs: FileSystem | None = None
) -> VirtualFile:
    """Blocking variant of `discover_source_map`."""

    state, options = _begin(file, options, "addSync")
    if state is not None:
        run_steps_sync(IMPORT_STEPS, fs or FileSystem(), file, state, options)
    return file
