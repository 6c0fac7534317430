from __future__ import annotations

"""`sourceMappingURL` comment grammar.

Recognized on import:

    //# sourceMappingURL=<url>        //@ sourceMappingURL=<url>
    /*# sourceMappingURL=<url> */     /*@ sourceMappingURL=<url> */

where `<url>` is either a `data:application/json[;charset=..][;base64],...`
payload (an inline map) or a path to an external `.map` file. On export only
the `#` forms are produced.
"""

import base64
import json
import os
import re
from typing import Any
from urllib.parse import unquote

from .fs import strip_bom
from .types import CommentStyle, SourceMap

INLINE_COMMENT = re.compile(
    r"^\s*?/[/*][@#]\s+?sourceMappingURL=data:"
    r"(?:(?:application|text)/json)(?:;charset=[^;,]+?)?(?:;(base64))?,"
    r"(.*?)(?:\s*\*/)?[ \t]*(?=\r?$)",
    re.MULTILINE,
)

MAP_FILE_COMMENT = re.compile(
    r"(?://[@#][ \t]+?sourceMappingURL=([^\s'\"`]+?)[ \t]*?(?=\r?$))"
    r"|(?:/\*[@#][ \t]+sourceMappingURL=([^*]+?)[ \t]*?(?:\*/)[ \t]*?(?=\r?$))",
    re.MULTILINE,
)


def find_inline_map(content: str) -> re.Match[str] | None:
    """Return the last inline map comment in `content`, if any."""

    match = None
    for match in INLINE_COMMENT.finditer(content):
        pass
    return match


def decode_inline_map(match: re.Match[str]) -> dict[str, Any]:
    """Decode the JSON payload of an inline map comment.

    Raises ValueError if the payload is not valid base64/JSON.
    """

    is_base64, payload = match.group(1), match.group(2).strip()
    if is_base64:
        try:
            raw = base64.b64decode(payload).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise ValueError(f"invalid base64 source map payload: {e}") from e
    else:
        raw = unquote(payload)
    return json.loads(strip_bom(raw))


def remove_inline_comments(content: str) -> str:
    return INLINE_COMMENT.sub("", content)


def find_map_file_reference(content: str) -> str | None:
    """Return the `.map` path referenced by the last map-file comment."""

    match = None
    for match in MAP_FILE_COMMENT.finditer(content):
        pass
    if match is None:
        return None
    return match.group(1) or match.group(2)


def remove_map_file_comments(content: str) -> str:
    return MAP_FILE_COMMENT.sub("", content)


def detect_newline(content: str) -> str:
    """Most frequent line terminator in `content`, or the platform default."""

    crlf = content.count("\r\n")
    cr = content.count("\r") - crlf
    lf = content.count("\n") - crlf
    if not (crlf or cr or lf):
        return os.linesep
    # max() keeps the first of equal counts: "\n" wins ties, then "\r\n".
    return max((lf, "\n"), (crlf, "\r\n"), (cr, "\r"), key=lambda pair: pair[0])[1]


def serialize_map(source_map: SourceMap) -> str:
    return json.dumps(source_map.to_dict(), separators=(",", ":"), ensure_ascii=False)


def to_data_url(source_map: SourceMap, charset: str = "utf8") -> str:
    encoded = base64.b64encode(serialize_map(source_map).encode("utf-8")).decode("ascii")
    return f"data:application/json;charset={charset};base64,{encoded}"


def format_comment(style: CommentStyle, url: str, newline: str) -> str:
    if style is CommentStyle.SLASH:
        return f"{newline}//# sourceMappingURL={url}{newline}"
    if style is CommentStyle.BLOCK:
        return f"{newline}/*# sourceMappingURL={url} */{newline}"
    return ""
