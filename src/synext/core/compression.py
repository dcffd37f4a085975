"""
Text compression transforms for synext.

Compression here means trimming text for prompt size, not byte-level
compression. The comment stripping in FULL is a language-agnostic
heuristic over lines and regular expressions, not a parser:

1. Block comments ``/* ... */`` and ``<!-- ... -->`` are removed.
2. Whole-line comments starting with ``//``, ``#`` or ``-- `` are dropped.
   ``#!`` shebangs, ``#[...]``/``#![...]`` attributes and C preprocessor
   directives are kept.
3. A trailing ``//`` comment preceded by whitespace is cut when the code
   before it has balanced quotes (so ``"http://..."`` survives).
4. The LIGHT transform runs on the result.

The only per-suffix knowledge is where a marker is known to be syntax:
``/*`` and ``//`` are globs, paths or operators in Python, shell, Ruby
and config formats; ``#`` starts selectors in stylesheets and private
fields in JavaScript; prose files (Markdown, reStructuredText, plain
text) get LIGHT only.

The FULL pipeline is repeated until the text stops changing, so applying
it to its own output is a no-op.
"""

import re
from typing import Optional

from .models import CompressionLevel


C_BLOCK_COMMENT = re.compile(r'/\*.*?\*/', re.DOTALL)
MARKUP_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)

PREPROCESSOR_DIRECTIVE = re.compile(
    r'#\s*(include|define|undef|if|ifdef|ifndef|elif|else|endif|pragma|import|error|line|region|endregion)\b'
)
ATTRIBUTE_PREFIXES = ('#[', '#![')

TRAILING_LINE_COMMENT = re.compile(r'\s//')

PROSE_SUFFIXES = frozenset({'.md', '.markdown', '.rst', '.txt', '.adoc'})
HASH_IS_SYNTAX = frozenset({
    '.css', '.scss', '.sass', '.less', '.styl',
    '.js', '.mjs', '.cjs', '.jsx', '.ts', '.tsx', '.rs',
})
# Formats without block or // comments
SLASH_IS_SYNTAX = frozenset({
    '.py', '.pyi', '.pyw', '.sh', '.bash', '.zsh', '.rb',
    '.yaml', '.yml', '.toml', '.ini', '.cfg', '.r', '.pl',
})

# Every productive pass shrinks the text; this bounds pathological input
MAX_PASSES = 32


def compress(text: str, level: CompressionLevel, suffix: Optional[str] = None) -> str:
    """
    Apply a compression level to decoded text.

    Args:
        text: Decoded file content.
        level: Compression tier to apply.
        suffix: Optional file suffix of the source file.

    Returns:
        Transformed text.
    """
    level = CompressionLevel.parse(level)
    suffix = (suffix or '').lower()
    if level is CompressionLevel.NONE or not text:
        return text
    if level is CompressionLevel.LIGHT or suffix in PROSE_SUFFIXES:
        return compress_whitespace(text)

    result = text
    for _ in range(MAX_PASSES):
        stripped = compress_whitespace(strip_comments(result, suffix))
        if stripped == result:
            break
        result = stripped
    return result


def compress_whitespace(text: str) -> str:
    """Strip trailing whitespace and collapse runs of blank lines to one."""
    lines = []
    previous_blank = True  # drops leading blank lines
    for line in text.splitlines():
        line = line.rstrip()
        if not line:
            if previous_blank:
                continue
            previous_blank = True
        else:
            previous_blank = False
        lines.append(line)

    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def strip_comments(text: str, suffix: str = '') -> str:
    """Remove block, whole-line and trailing comments."""
    slash_comments = suffix not in SLASH_IS_SYNTAX
    hash_comments = suffix not in HASH_IS_SYNTAX

    if slash_comments:
        text = C_BLOCK_COMMENT.sub('', text)
        text = MARKUP_COMMENT.sub('', text)

    lines = []
    for index, line in enumerate(text.splitlines()):
        if _is_comment_line(line.strip(), index == 0, hash_comments, slash_comments):
            continue
        if slash_comments:
            line = _strip_trailing_comment(line)
        lines.append(line)
    return "\n".join(lines)


def _is_comment_line(stripped: str, first_line: bool, hash_comments: bool, slash_comments: bool) -> bool:
    if stripped.startswith('//'):
        return slash_comments
    if stripped.startswith('#'):
        if not hash_comments or stripped.startswith(ATTRIBUTE_PREFIXES):
            return False
        if first_line and stripped.startswith('#!'):
            return False
        return not PREPROCESSOR_DIRECTIVE.match(stripped)
    return stripped == '--' or stripped.startswith('-- ')


def _strip_trailing_comment(line: str) -> str:
    for match in TRAILING_LINE_COMMENT.finditer(line):
        code = line[:match.start()]
        if _quotes_balanced(code):
            return code.rstrip()
    return line


def _quotes_balanced(code: str) -> bool:
    return all(code.count(quote) % 2 == 0 for quote in ('"', "'", '`'))
