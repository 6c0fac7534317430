from __future__ import annotations

import base64
import os
import unittest

from build_sourcemaps.comments import (
    decode_inline_map,
    detect_newline,
    find_inline_map,
    find_map_file_reference,
    format_comment,
    remove_inline_comments,
    remove_map_file_comments,
    to_data_url,
)
from build_sourcemaps.types import CommentStyle, SourceMap


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestInlineComments(unittest.TestCase):
    def test_finds_and_decodes_each_syntax(self):
        payload = encode('{"version":3,"sources":["a.js"]}')
        comments = (
            f"//# sourceMappingURL=data:application/json;base64,{payload}",
            f"//@ sourceMappingURL=data:application/json;charset=utf-8;base64,{payload}",
            f"/*# sourceMappingURL=data:application/json;base64,{payload} */",
            f"/*@ sourceMappingURL=data:application/json;charset=utf8;base64,{payload} */",
        )
        for comment in comments:
            with self.subTest(comment=comment[:24]):
                match = find_inline_map("a();\n" + comment)
                self.assertIsNotNone(match)
                self.assertEqual(decode_inline_map(match), {"version": 3, "sources": ["a.js"]})

    def test_decodes_uri_encoded_payload(self):
        match = find_inline_map('//# sourceMappingURL=data:application/json,%7B%22version%22%3A3%7D')
        self.assertEqual(decode_inline_map(match), {"version": 3})

    def test_takes_last_inline_comment(self):
        first = "//# sourceMappingURL=data:application/json;base64," + encode('{"version":1}')
        last = "//# sourceMappingURL=data:application/json;base64," + encode('{"version":3}')
        match = find_inline_map(f"a();\n{first}\nb();\n{last}")
        self.assertEqual(decode_inline_map(match), {"version": 3})

    def test_invalid_payload_raises_value_error(self):
        match = find_inline_map(f"//# sourceMappingURL=data:application/json;base64,{encode('nope')}")
        with self.assertRaises(ValueError):
            decode_inline_map(match)

    def test_removes_inline_comment(self):
        content = f"a();\n//# sourceMappingURL=data:application/json;base64,{encode('{}')}"
        self.assertEqual(remove_inline_comments(content), "a();\n")

    def test_ignores_plain_map_file_comment(self):
        self.assertIsNone(find_inline_map("a();\n//# sourceMappingURL=a.js.map"))


class TestMapFileComments(unittest.TestCase):
    def test_finds_reference_in_each_syntax(self):
        for comment in (
            "//# sourceMappingURL=a.js.map",
            "//@ sourceMappingURL=a.js.map",
            "/*# sourceMappingURL=a.js.map */",
            "/*@ sourceMappingURL=a.js.map */",
        ):
            with self.subTest(comment=comment):
                self.assertEqual(find_map_file_reference("a();\n" + comment), "a.js.map")
                self.assertEqual(remove_map_file_comments("a();\n" + comment), "a();\n")

    def test_finds_reference_before_crlf(self):
        content = "a();\r\n//# sourceMappingURL=../maps/a.js.map\r\n"
        self.assertEqual(find_map_file_reference(content), "../maps/a.js.map")
        self.assertEqual(remove_map_file_comments(content), "a();\r\n\r\n")

    def test_no_reference(self):
        self.assertIsNone(find_map_file_reference("a();\n// sourceMappingURL is documented elsewhere\n"))


class TestNewlines(unittest.TestCase):
    def test_detect_newline(self):
        self.assertEqual(detect_newline("a\nb\n"), "\n")
        self.assertEqual(detect_newline("a\r\nb\r\n"), "\r\n")
        self.assertEqual(detect_newline("a\rb\r"), "\r")
        self.assertEqual(detect_newline("a\r\nb\nc\r\n"), "\r\n")
        self.assertEqual(detect_newline("a\r\nb\n"), "\n")
        self.assertEqual(detect_newline("abc"), os.linesep)


class TestFormatting(unittest.TestCase):
    def test_format_comment(self):
        self.assertEqual(format_comment(CommentStyle.SLASH, "a.map", "\n"), "\n//# sourceMappingURL=a.map\n")
        self.assertEqual(format_comment(CommentStyle.BLOCK, "a.map", "\r\n"), "\r\n/*# sourceMappingURL=a.map */\r\n")
        self.assertEqual(format_comment(CommentStyle.NONE, "a.map", "\n"), "")

    def test_comment_style_lookup(self):
        self.assertIs(CommentStyle.for_extension(".js"), CommentStyle.SLASH)
        self.assertIs(CommentStyle.for_extension(".mjs"), CommentStyle.SLASH)
        self.assertIs(CommentStyle.for_extension(".CSS"), CommentStyle.BLOCK)
        self.assertIs(CommentStyle.for_extension(".txt"), CommentStyle.NONE)
        self.assertIs(CommentStyle.for_extension(""), CommentStyle.NONE)

    def test_data_url_round_trips(self):
        source_map = SourceMap(sources=["ü.js"], sources_content=["€"], source_root="")
        url = to_data_url(source_map, "utf8")

        self.assertTrue(url.startswith("data:application/json;charset=utf8;base64,"))
        match = find_inline_map("//# sourceMappingURL=" + url)
        self.assertEqual(decode_inline_map(match), source_map.to_dict())


if __name__ == "__main__":
    unittest.main()
