from __future__ import annotations

PLUGIN_NAME = "build-sourcemaps"


class SourceMapError(Exception):
    """Base exception for build-sourcemaps."""


class NotVinylFileError(SourceMapError, TypeError):
    """Raised when the input is not a `VirtualFile`."""


class InvalidOptionsError(SourceMapError, TypeError):
    """Raised when the options argument has the wrong type."""


class StreamingNotSupportedError(SourceMapError):
    """Raised when file contents are an unmaterialized stream."""


class NoSourceMapFoundError(SourceMapError):
    """Raised when exporting a file that carries no source map."""


class UnsafePathError(SourceMapError):
    """Raised when a path is unsafe to write to disk."""
