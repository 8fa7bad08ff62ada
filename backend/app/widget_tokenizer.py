from __future__ import annotations

import re

from .widget_models import PendingFlags

QUOTE_CHARS = ('"', "'")

FLOAT_PREFIX_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
INT_PREFIX_RE = re.compile(r"\s*([+-]?\d+)")


class ArraySyntaxError(ValueError):
    pass


def tokenize(line: str) -> list[str]:
    """Split a DSL line on whitespace, keeping "quoted spans" and [array spans] whole.

    Quotes are stripped from scalar tokens. Array tokens keep their brackets and
    their raw inner text so that `normalize_array_syntax` can see the original
    separators. Unterminated quotes or arrays are not an error here.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    in_array = False

    def flush() -> None:
        text = "".join(current).strip()
        if text:
            tokens.append(text)
        current.clear()

    for char in line:
        if char == '"' and not in_array:
            in_quotes = not in_quotes
            continue
        if char == "[" and not in_quotes:
            in_array = True
            continue
        if char == "]" and not in_quotes and in_array:
            in_array = False
            tokens.append(f"[{''.join(current).strip()}]")
            current.clear()
            continue
        if char in (" ", "\n") and not in_quotes and not in_array:
            flush()
            continue
        current.append(char)

    flush()
    return tokens


def token_at(tokens: list[str], index: int) -> str | None:
    return tokens[index] if len(tokens) > index else None


def _split_items(content: str, quote_chars: tuple[str, ...], separators: tuple[str, ...]) -> list[str]:
    items: list[str] = []
    current: list[str] = []
    quote_char = ""

    for char in content:
        if not quote_char and char in quote_chars:
            quote_char = char
            continue
        if quote_char and char == quote_char:
            quote_char = ""
            continue
        if not quote_char and char in separators:
            item = "".join(current).strip()
            if item:
                items.append(item)
            current.clear()
            continue
        current.append(char)

    item = "".join(current).strip()
    if item:
        items.append(item)
    return items


def normalize_array_syntax(array_token: str) -> str:
    """Rewrite `["a","b"]`, `['a', 'b']`, `[a,b]` and `[a b]` as the canonical `[a b]`.

    Items containing a space or an apostrophe are double quoted, so the output
    normalizes to itself.
    """
    if not (array_token.startswith("[") and array_token.endswith("]")):
        return array_token

    content = array_token[1:-1].strip()
    if not content:
        return "[]"

    items = _split_items(content, QUOTE_CHARS, (",", " "))
    return "[" + " ".join(f'"{item}"' if " " in item or "'" in item else item for item in items) + "]"


def parse_array(array_token: str) -> list[str]:
    if not (array_token.startswith("[") and array_token.endswith("]")):
        raise ArraySyntaxError("Invalid array format")

    content = normalize_array_syntax(array_token)[1:-1].strip()
    if not content:
        return []
    return _split_items(content, ('"',), (" ",))


def try_parse_array(array_token: str) -> list[str] | None:
    try:
        return parse_array(array_token)
    except ArraySyntaxError:
        return None


def parse_float_prefix(value: str) -> float | None:
    """Leading decimal literal of `value` ("12px" -> 12.0), or None when there is none."""
    match = FLOAT_PREFIX_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


def parse_number_prefix(value: str) -> int | float | None:
    """Like `parse_float_prefix`, but whole values come back as `int` so they dump as `1`, not `1.0`."""
    number = parse_float_prefix(value)
    if number is not None and number.is_integer():
        return int(number)
    return number


def parse_int_prefix(value: str) -> int | None:
    match = INT_PREFIX_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def _scan_open_state(text: str) -> tuple[str, int]:
    quote_char = ""
    depth = 0
    for char in text:
        if not quote_char and char in QUOTE_CHARS:
            quote_char = char
        elif quote_char and char == quote_char:
            quote_char = ""
        elif not quote_char and char == "[":
            depth += 1
        elif not quote_char and char == "]":
            depth -= 1
    return quote_char, depth


def detect_pending_state(text: str) -> PendingFlags:
    quote_char, depth = _scan_open_state(text)
    return PendingFlags(unclosed_bracket=depth > 0, unclosed_quote=bool(quote_char))


def auto_complete_arrays(text: str) -> str:
    """Close a dangling quote, then every bracket still open at the end of `text`."""
    quote_char, depth = _scan_open_state(text)
    return text + quote_char + "]" * max(depth, 0)
