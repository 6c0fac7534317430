from __future__ import annotations

"""Sequential step runner shared by the importer and the exporter.

A step is a callable `step(file, state, options)`. Steps that need file
contents are generators: they yield a list of paths and are sent back a list
of the same length holding the text of each path (or None where the read
failed). Steps never read the filesystem themselves, which lets one step list
run under both the blocking and the asyncio runner with identical results.

Steps run strictly one after another. Within a step, the reads of a single
batch are independent: the async runner gathers them concurrently.
"""

import asyncio
import inspect
from typing import Any, Callable, Generator, Sequence

from .fs import FileSystem

ReadBatch = Generator[list[str], list["str | None"], None]
Step = Callable[..., "ReadBatch | None"]


def run_steps_sync(steps: Sequence[Step], fs: FileSystem, *args: Any) -> None:
    for step in steps:
        result = step(*args)
        if not inspect.isgenerator(result):
            continue
        try:
            paths = next(result)
            while True:
                paths = result.send([fs.read_text(p) for p in paths])
        except StopIteration:
            pass


async def run_steps(steps: Sequence[Step], fs: FileSystem, *args: Any) -> None:
    for step in steps:
        result = step(*args)
        if not inspect.isgenerator(result):
            continue
        try:
            paths = next(result)
            while True:
                texts = await asyncio.gather(*(fs.read_text_async(p) for p in paths))
                paths = result.send(list(texts))
        except StopIteration:
            pass
