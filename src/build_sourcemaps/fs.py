from __future__ import annotations

"""Read-only filesystem access for the pipelines.

Every read is failure tolerant: a missing, unreadable or undecodable file
yields None instead of raising, so a single bad `sources` entry never aborts a
whole import or export.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

BOM = "\ufeff"


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM) else text


class FileSystem:
    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def read_text(self, path: str) -> str | None:
        try:
            with open(path, "r", encoding=self.encoding, newline="") as fh:
                return strip_bom(fh.read())
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("read failed for %s: %s", path, e)
            return None

    async def read_text_async(self, path: str) -> str | None:
        return await asyncio.to_thread(self.read_text, path)
