from __future__ import annotations

"""Public entry points.

    file = await add(file, AddOptions(load_maps=True))
    ...transform file.contents / file.source_map...
    outputs = await write(file, "../maps")
"""

from .exporter import embed_source_map, embed_source_map_sync
from .importer import discover_source_map, discover_source_map_sync

add = discover_source_map
add_sync = discover_source_map_sync
write = embed_source_map
write_sync = embed_source_map_sync

__all__ = [
    "add",
    "add_sync",
    "discover_source_map",
    "discover_source_map_sync",
    "embed_source_map",
    "embed_source_map_sync",
    "write",
    "write_sync",
]
