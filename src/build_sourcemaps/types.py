from __future__ import annotations

"""Data model shared by the importer and the exporter.

`VirtualFile` mirrors the in-memory file objects a build pipeline passes
around (cwd, base, path, contents). `SourceMap` is the v3 JSON structure in a
mutable form that keeps unknown keys around so they survive a round trip.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol


@dataclass(frozen=True)
class FileStat:
    kind: str = "file"

    @classmethod
    def regular(cls) -> "FileStat":
        return cls(kind="file")

    def is_file(self) -> bool:
        return self.kind == "file"

    def is_directory(self) -> bool:
        return self.kind == "directory"

    def is_block_device(self) -> bool:
        return self.kind == "block"

    def is_character_device(self) -> bool:
        return self.kind == "character"

    def is_symbolic_link(self) -> bool:
        return self.kind == "symlink"

    def is_fifo(self) -> bool:
        return self.kind == "fifo"

    def is_socket(self) -> bool:
        return self.kind == "socket"


@dataclass(eq=False)
class VirtualFile:
    """A file flowing through the pipeline.

    `contents` is `bytes` for a materialized file, `None` for a null file and
    anything else (a reader, an iterator of chunks) for a streaming file.
    """

    path: str
    base: str | None = None
    cwd: str = field(default_factory=os.getcwd)
    contents: Any = None
    stat: FileStat | None = None
    source_map: SourceMap | None = None

    def __post_init__(self) -> None:
        if self.base is None:
            self.base = self.cwd

    @property
    def relative(self) -> str:
        return os.path.relpath(self.path, self.base)

    @property
    def dirname(self) -> str:
        return os.path.dirname(self.path)

    @property
    def basename(self) -> str:
        return os.path.basename(self.path)

    @property
    def extname(self) -> str:
        return os.path.splitext(self.path)[1]

    def is_null(self) -> bool:
        return self.contents is None

    def is_buffer(self) -> bool:
        return isinstance(self.contents, (bytes, bytearray))

    def is_stream(self) -> bool:
        return not self.is_null() and not self.is_buffer()

    @property
    def text(self) -> str:
        return bytes(self.contents).decode("utf-8", errors="replace")

    @text.setter
    def text(self, value: str) -> None:
        self.contents = value.encode("utf-8")


def _list_field(data: dict[str, Any], key: str, default: list | None) -> list | None:
    value = data.get(key, default)
    if value is None and default is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"source map '{key}' must be a list")
    return value


def _str_field(data: dict[str, Any], key: str, default: str | None) -> str | None:
    value = data.get(key, default)
    if value is None and default is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"source map '{key}' must be a string")
    return value


@dataclass(eq=False)
class SourceMap:
    version: int = 3
    file: str | None = None
    sources: list[str] = field(default_factory=list)
    sources_content: list[str | None] | None = None
    source_root: str | None = None
    names: list[str] = field(default_factory=list)
    mappings: str = ""
    extras: dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("version", "file", "sourceRoot", "sources", "sourcesContent", "names", "mappings")

    @classmethod
    def from_dict(cls, data: Any) -> "SourceMap":
        if not isinstance(data, dict):
            raise ValueError(f"source map must be a JSON object, got {type(data).__name__}")

        version = data.get("version", 3)
        if isinstance(version, bool) or version != 3:
            raise ValueError(f"unsupported source map version: {version!r}")

        sources = _list_field(data, "sources", [])
        if not all(isinstance(s, str) for s in sources):
            raise ValueError("source map 'sources' entries must be strings")

        sources_content = _list_field(data, "sourcesContent", None)
        if sources_content is not None and not all(c is None or isinstance(c, str) for c in sources_content):
            raise ValueError("source map 'sourcesContent' entries must be strings or null")

        names = _list_field(data, "names", [])
        if not all(isinstance(n, str) for n in names):
            raise ValueError("source map 'names' entries must be strings")

        return cls(
            version=3,
            file=_str_field(data, "file", None),
            sources=list(sources),
            sources_content=list(sources_content) if sources_content is not None else None,
            source_root=_str_field(data, "sourceRoot", None),
            names=list(names),
            mappings=_str_field(data, "mappings", ""),
            extras={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"version": self.version}
        if self.file is not None:
            out["file"] = self.file
        if self.source_root is not None:
            out["sourceRoot"] = self.source_root
        out["sources"] = list(self.sources)
        if self.sources_content is not None:
            out["sourcesContent"] = list(self.sources_content)
        out["names"] = list(self.names)
        out["mappings"] = self.mappings
        out.update(self.extras)
        return out


class CommentStyle(Enum):
    NONE = "none"
    SLASH = "slash"
    BLOCK = "block"

    @classmethod
    def for_extension(cls, extname: str) -> "CommentStyle":
        return _COMMENT_STYLES.get(extname.lower(), cls.NONE)


_COMMENT_STYLES = {
    ".js": CommentStyle.SLASH,
    ".mjs": CommentStyle.SLASH,
    ".cjs": CommentStyle.SLASH,
    ".css": CommentStyle.BLOCK,
}


class IdentityMapGenerator(Protocol):
    """Produces a one-to-one map for plain text it knows how to tokenize."""

    def supports(self, extname: str) -> bool: ...

    def generate(self, relative_path: str, content: str) -> dict[str, Any]: ...


@dataclass
class AddOptions:
    load_maps: bool = False
    identity_map: bool = False
    debug: bool = False
    identity_map_generator: IdentityMapGenerator | None = None


@dataclass
class WriteOptions:
    include_content: bool = True
    add_comment: bool = True
    charset: str = "utf8"
    source_root: str | None = None
    dest_path: str | None = None
    map_file: Callable[[str], str] | None = None
    map_sources: Callable[[str], str] | None = None
    source_mapping_url_prefix: str | None = None
    source_mapping_url: str | None = None
    debug: bool = False
