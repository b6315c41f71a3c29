"""Identifier case conversions used for schema titles and enum prefixes."""

from __future__ import annotations

from itertools import groupby

_WORD_BREAKS = frozenset(" _-.")
_ACRONYMS = {"ID": "id"}


def _is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def to_camel(name: str) -> str:
    """Convert an identifier to UpperCamelCase, dropping word separators."""
    text = name.strip()
    text = _ACRONYMS.get(text, text)
    out: list[str] = []
    cap_next = True
    for ch in text:
        if _is_upper(ch) or _is_lower(ch):
            out.append(ch.upper() if cap_next else ch)
            cap_next = False
        elif _is_digit(ch):
            out.append(ch)
            cap_next = True
        else:
            cap_next = ch in _WORD_BREAKS
    return "".join(out)


def _char_class(ch: str) -> int:
    if ch.islower():
        return 1
    if ch.isupper():
        return 2
    if ch.isdecimal():
        return 3
    return 4


def split_camel(text: str) -> list[str]:
    """Split a camel-cased string into its words, keeping acronyms together."""
    runs = [list(group) for _, group in groupby(text, key=_char_class)]
    for left, right in zip(runs, runs[1:]):
        if left and left[0].isupper() and right[0].islower():
            right.insert(0, left.pop())
    return ["".join(run) for run in runs if run]


def title_from_name(name: str) -> str:
    """Build a human-readable title ("Payload Message 2") from an identifier."""
    return " ".join(split_camel(to_camel(name)))


def to_screaming_snake(name: str) -> str:
    """Convert an identifier to SCREAMING_SNAKE_CASE."""
    text = name.strip()
    out: list[str] = []
    for prev, ch, nxt in zip(" " + text, text, text[1:] + " "):
        was_upper = _is_upper(ch)
        was_lower = _is_lower(ch)
        if was_lower:
            ch = ch.upper()
        is_digit = _is_digit(ch)
        next_upper, next_lower, next_digit = _is_upper(nxt), _is_lower(nxt), _is_digit(nxt)
        if (
            (was_upper and (next_lower or next_digit))
            or (was_lower and (next_upper or next_digit))
            or (is_digit and (next_upper or next_lower))
        ):
            if was_upper and next_lower and _is_upper(prev):
                out.append("_")
            out.append(ch)
            if was_lower or is_digit or next_digit:
                out.append("_")
            continue
        out.append("_" if ch in _WORD_BREAKS else ch)
    return "".join(out)