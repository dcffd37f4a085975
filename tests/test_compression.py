"""Tests for the compression transforms."""

import pytest
from synext.core.compression import compress, compress_whitespace, strip_comments
from synext.core.models import CompressionLevel


TS_SOURCE = '''// header comment
const url = "http://example.com"; // trailing note
/* block
   comment */
let x = 1;



let y = 2;
'''

SAMPLES = [
    ("", ".ts"),
    (TS_SOURCE, ".ts"),
    ("#!/usr/bin/env python\n# comment\n\n\nx = 7 // 2  \n", ".py"),
    ("#app { color: red; }\n/* unused */\n\n\n.b {}\n", ".css"),
    ("# Title\n\n\n\ntext  \n", ".md"),
    ("<!-- note -->\n<div>\n\n\n</div>\n", ".html"),
    ("-- comment\nSELECT 1; -- inline\n", ".sql"),
    ("   \n\n\t\n", ".ts"),
]


class TestCompressNone:
    def test_returns_text_unchanged(self):
        assert compress(TS_SOURCE, CompressionLevel.NONE, ".ts") == TS_SOURCE

    def test_accepts_level_name(self):
        assert compress("a  \n\n\nb", "light") == "a\n\nb"


class TestCompressLight:
    def test_strips_trailing_whitespace(self):
        assert compress_whitespace("a   \nb\t\n") == "a\nb"

    def test_collapses_blank_runs(self):
        assert compress_whitespace("a\n\n\n\nb\n\n\nc") == "a\n\nb\n\nc"

    def test_drops_leading_and_trailing_blank_lines(self):
        assert compress_whitespace("\n\n  \nbody\n\n\n") == "body"

    def test_keeps_comments(self):
        result = compress(TS_SOURCE, CompressionLevel.LIGHT, ".ts")
        assert "// header comment" in result
        assert "\n\n\n" not in result

    def test_whitespace_only_becomes_empty(self):
        assert compress("  \n\t\n", CompressionLevel.LIGHT) == ""


class TestCompressFull:
    def test_removes_comments_from_source(self):
        result = compress(TS_SOURCE, CompressionLevel.FULL, ".ts")
        assert "header comment" not in result
        assert "trailing note" not in result
        assert "block" not in result
        assert 'const url = "http://example.com";' in result
        assert "let x = 1;" in result
        assert "let y = 2;" in result
        assert "\n\n\n" not in result

    def test_keeps_shebang_and_floor_division_in_python(self):
        source = "#!/usr/bin/env python\n# comment\nx = 7 // 2\n"
        assert compress(source, CompressionLevel.FULL, ".py") == "#!/usr/bin/env python\nx = 7 // 2"

    def test_keeps_preprocessor_directives(self):
        source = "#include <stdio.h>\n// entry point\nint main() { return 0; }\n"
        assert compress(source, CompressionLevel.FULL, ".c") == "#include <stdio.h>\nint main() { return 0; }"

    def test_hash_is_selector_in_stylesheets(self):
        source = "#app { color: red; }\n/* unused */\n"
        assert compress(source, CompressionLevel.FULL, ".css") == "#app { color: red; }"

    def test_html_comments(self):
        source = "<!-- note -->\n<div>x</div>\n"
        assert compress(source, CompressionLevel.FULL, ".html") == "<div>x</div>"

    def test_sql_line_comments(self):
        assert compress("-- comment\nSELECT 1;\n", CompressionLevel.FULL, ".sql") == "SELECT 1;"

    def test_prose_only_gets_whitespace_compression(self):
        source = "# Title\n\n\n\n// not code\ntext  \n"
        assert compress(source, CompressionLevel.FULL, ".md") == "# Title\n\n// not code\ntext"

    def test_globs_in_python_strings_survive(self):
        source = 'files = glob("src/*.py")\nx = 1\nother = glob("**/*.md")\n'
        expected = 'files = glob("src/*.py")\nx = 1\nother = glob("**/*.md")'
        assert compress(source, CompressionLevel.FULL, ".py") == expected

    @pytest.mark.parametrize("suffix", [".sh", ".yaml", ".toml"])
    def test_slash_star_is_not_a_comment_in_scripts_and_config(self, suffix):
        source = 'paths = "build/*.o"\nkeep = "yes"\npattern = "*/tmp"'
        assert compress(source, CompressionLevel.FULL, suffix) == source

    def test_rust_attributes_are_kept(self):
        source = "#![allow(dead_code)]\n// helper\n#[derive(Debug)]\nstruct A;\n"
        assert compress(source, CompressionLevel.FULL, ".rs") == "#![allow(dead_code)]\n#[derive(Debug)]\nstruct A;"

    @pytest.mark.parametrize("suffix", [".js", ".ts"])
    def test_private_class_fields_are_kept(self, suffix):
        source = "class C {\n  #count = 0;\n}\n"
        assert compress(source, CompressionLevel.FULL, suffix) == "class C {\n  #count = 0;\n}"

    def test_unbalanced_quotes_keep_trailing_text(self):
        line = "const s = 'a // b';"
        assert strip_comments(line, ".ts") == line


class TestIdempotence:
    @pytest.mark.parametrize("level", [CompressionLevel.LIGHT, CompressionLevel.FULL])
    @pytest.mark.parametrize("text,suffix", SAMPLES)
    def test_compress_twice_equals_once(self, level, text, suffix):
        once = compress(text, level, suffix)
        assert compress(once, level, suffix) == once

    def test_nested_block_markers_reach_fixed_point(self):
        text = "/* a /* b */ c */\nx = 1;\n// */ y\n"
        once = compress(text, CompressionLevel.FULL, ".ts")
        assert compress(once, CompressionLevel.FULL, ".ts") == once
