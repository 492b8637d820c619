"""
Boundary scanner and argument splitter for the expression mini-language.

Expressions are scanned as flat text: a "word" is the run of characters
between the current position and the next boundary (an operator, comma,
bracket, parenthesis, brace or quote). Quoted substrings are opaque: no
boundary, delimiter or comma inside quotes is ever significant.

All functions here expect whitespace to have been removed already
(see `strip_whitespace`).
"""

import re
from typing import Iterator, List, Tuple

from dmel.errors import ExpressionSyntaxError, UnmatchedDelimiter


QUOTES = "'\""
OPENERS = "([{"
CLOSERS = ")]}"
OPERATORS = "+-*/^%=<>!&|~;:"
BREAK_CHARS = frozenset(OPERATORS + "," + OPENERS + CLOSERS + QUOTES)

# Mantissa of a numeric literal whose exponent sign is about to follow (1.5e-3)
_EXPONENT_PREFIX_RE = re.compile(r'^(\d+\.?\d*|\.\d+)[eE]$')


def strip_whitespace(text: str) -> str:
    """Remove all whitespace outside quoted substrings."""
    out = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch in QUOTES:
            close = _close_quote(text, pos)
            out.append(text[pos:close + 1])
            pos = close + 1
            continue
        if not ch.isspace():
            out.append(ch)
        pos += 1
    return "".join(out)


def _close_quote(text: str, open_pos: int) -> int:
    """Return the index of the quote closing the one at `open_pos`."""
    quote = text[open_pos]
    close = text.find(quote, open_pos + 1)
    if close < 0:
        raise UnmatchedDelimiter(f"Unterminated string starting at {open_pos}: {text[open_pos:]}")
    return close


def next_break(text: str, start: int = 0) -> int:
    """
    Return the index of the first character at or after `start` that
    cannot extend the current word.

    A word that starts with a quote extends through its closing quote, so
    the returned index is just past it. A sign directly after a numeric
    mantissa with an exponent marker (the `-` in `1.5e-3`) does not break.

    Returns len(text) if the word runs to the end of the text.
    """
    if start < len(text) and text[start] in QUOTES:
        return _close_quote(text, start) + 1

    pos = start
    while pos < len(text):
        ch = text[pos]
        if ch in BREAK_CHARS:
            if (ch in "+-" and pos + 1 < len(text) and text[pos + 1].isdigit()
                    and _EXPONENT_PREFIX_RE.match(text[start:pos])):
                pos += 1
                continue
            return pos
        pos += 1
    return pos


def _match(text: str, open_pos: int, opener: str, closer: str) -> int:
    if open_pos >= len(text) or text[open_pos] != opener:
        raise ExpressionSyntaxError(f"Expected '{opener}' at position {open_pos} in: {text}")

    depth = 0
    pos = open_pos
    while pos < len(text):
        ch = text[pos]
        if ch in QUOTES:
            pos = _close_quote(text, pos) + 1
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return pos
        pos += 1

    raise UnmatchedDelimiter(f"Unmatched '{opener}' at position {open_pos} in: {text}")


def match_bracket(text: str, open_pos: int) -> int:
    """Return the index of the `]` that closes the `[` at `open_pos`."""
    return _match(text, open_pos, "[", "]")


def match_paren(text: str, open_pos: int) -> int:
    """Return the index of the `)` that closes the `(` at `open_pos`."""
    return _match(text, open_pos, "(", ")")


def split_args(text: str) -> List[str]:
    """
    Split an argument list body on top-level commas.

    Commas nested inside (), [], {} or quotes are not split points.

    Examples:
        split_args("a,(b,c),d")  ->  ["a", "(b,c)", "d"]
        split_args("")           ->  []
    """
    if not text:
        return []

    args: List[str] = []
    depth = 0
    start = 0
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch in QUOTES:
            pos = _close_quote(text, pos) + 1
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            args.append(text[start:pos])
            start = pos + 1
        pos += 1
    args.append(text[start:])
    return args


def iter_word_spans(text: str) -> Iterator[Tuple[int, str, str]]:
    """
    Yield every (start, word, separator) triple of `text`, left to right.

    The separator is the single boundary character that followed the word,
    or "" at the end of the text. Delimiter spans are not skipped, so
    words nested inside argument lists are yielded too.
    """
    pos = 0
    while pos < len(text):
        end = next_break(text, pos)
        if end == pos:
            yield pos, "", text[pos]
            pos += 1
            continue
        sep = text[end] if end < len(text) else ""
        yield pos, text[pos:end], sep
        pos = end + 1 if sep and sep not in QUOTES else end


def iter_words(text: str) -> Iterator[Tuple[str, str]]:
    """Yield every (word, separator) pair of `text`, left to right."""
    for _, word, sep in iter_word_spans(text):
        yield word, sep


def nesting_depth(text: str) -> int:
    """Maximum nesting depth of (), [] and {} outside quotes."""
    depth = 0
    deepest = 0
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch in QUOTES:
            pos = _close_quote(text, pos) + 1
            continue
        if ch in OPENERS:
            depth += 1
            deepest = max(deepest, depth)
        elif ch in CLOSERS:
            depth -= 1
        pos += 1
    return deepest


__all__ = [
    "strip_whitespace",
    "next_break",
    "match_bracket",
    "match_paren",
    "split_args",
    "iter_word_spans",
    "iter_words",
    "nesting_depth",
]
