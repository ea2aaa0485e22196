"""Kakoune double-quoted token encoding.

Only the double quote is escaped. Newlines and every other character are
passed through literally so Kakoune reads each argument back as exactly one
token with the original value.
"""

from __future__ import annotations

from typing import Literal

QuoteStyle = Literal["doubled", "backslash"]

QUOTE = '"'
DEFAULT_QUOTE_STYLE: QuoteStyle = "doubled"


def escape_char(value: str, char: str, style: QuoteStyle = DEFAULT_QUOTE_STYLE) -> str:
    """Escape every occurrence of ``char`` in ``value`` and nothing else."""
    if len(char) != 1:
        msg = f"escape_char expects a single character, got {char!r}"
        raise ValueError(msg)
    if style == "doubled":
        return value.replace(char, char * 2)
    if style == "backslash":
        return value.replace(char, "\\" + char)
    msg = f"Unknown quote style: {style}"
    raise ValueError(msg)


def encode(value: str, style: QuoteStyle = DEFAULT_QUOTE_STYLE) -> str:
    """Return ``value`` as a single double-quoted Kakoune token.

    The backslash convention cannot represent a trailing backslash: it would
    escape the closing quote, so such values are rejected.
    """
    if style == "backslash" and value.endswith("\\"):
        msg = f"Value ending in a backslash cannot be quoted with the backslash style: {value!r}"
        raise ValueError(msg)
    return f"{QUOTE}{escape_char(value, QUOTE, style)}{QUOTE}"


def read_token(text: str, start: int = 0, style: QuoteStyle = DEFAULT_QUOTE_STYLE) -> tuple[str, int]:
    """Read the double-quoted token that opens at ``text[start]``.

    Returns:
        The token value and the offset just past its closing quote.
    """
    if text[start : start + 1] != QUOTE:
        msg = f"Expected a double quote at offset {start} in {text!r}"
        raise ValueError(msg)
    chars: list[str] = []
    i = start + 1
    while i < len(text):
        char = text[i]
        if style == "backslash" and char == "\\" and text[i + 1 : i + 2] == QUOTE:
            chars.append(QUOTE)
            i += 2
            continue
        if char == QUOTE:
            if style == "doubled" and text[i + 1 : i + 2] == QUOTE:
                chars.append(QUOTE)
                i += 2
                continue
            return "".join(chars), i + 1
        chars.append(char)
        i += 1
    msg = f"Unterminated quoted token starting at offset {start} in {text!r}"
    raise ValueError(msg)


def decode(token: str, style: QuoteStyle = DEFAULT_QUOTE_STYLE) -> str:
    """Read one double-quoted token back into its value.

    Mirrors how Kakoune parses a quoted word, restricted to what ``encode``
    produces.
    """
    value, end = read_token(token, 0, style)
    if end != len(token):
        msg = f"Unexpected text after closing quote at offset {end} in {token!r}"
        raise ValueError(msg)
    return value
