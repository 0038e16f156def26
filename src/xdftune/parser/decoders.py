"""
Value Decoders
===============
Text and attribute decoding shared by the dispatcher and the builders.

Integers are written either in decimal or as ``0x``-prefixed hexadecimal
(``mmedaddress="0x1EF7E"``, ``<decimalpl>2</decimalpl>``). All addresses and
sizes in an XDF fit in 32 bits.
"""

from __future__ import annotations

import re
from typing import Any, Callable, TypeVar

from ..errors import BadValue, MissingItem, UnexpectedEvent
from ..markup.events import Characters, EndElement, EventCursor, StartElement

T = TypeVar("T")

U32_MAX = 0xFFFFFFFF
I32_MIN = -0x80000000
I32_MAX = 0x7FFFFFFF

_DECIMAL = re.compile(r"[0-9]+")
_SIGNED_DECIMAL = re.compile(r"-?[0-9]+")
_HEX = re.compile(r"[0-9A-Fa-f]+")


def _parse_integer(text: str, decimal: re.Pattern[str], low: int, high: int, expected: str) -> int:
    if text.startswith("0x"):
        digits, base, pattern = text[2:], 16, _HEX
    else:
        digits, base, pattern = text, 10, decimal
    if not pattern.fullmatch(digits):
        raise BadValue(text, expected)
    value = int(digits, base)
    if not low <= value <= high:
        raise BadValue(text, expected)
    return value


def decode_int(text: str) -> int:
    """
    Decode an unsigned 32-bit integer.

    >>> decode_int("0x1F"), decode_int("31")
    (31, 31)
    """
    return _parse_integer(text, _DECIMAL, 0, U32_MAX, "an unsigned 32-bit integer")


def decode_signed(text: str) -> int:
    """Decode a signed 32-bit integer (stride fields may be negative)."""
    return _parse_integer(text, _SIGNED_DECIMAL, I32_MIN, I32_MAX, "a signed 32-bit integer")


def decode_float(text: str) -> float:
    """Decode a decimal float; padding and digit separators are rejected."""
    if text != text.strip() or "_" in text:
        raise BadValue(text, "a float")
    try:
        return float(text)
    except ValueError:
        raise BadValue(text, "a float") from None


def extract_text(cursor: EventCursor) -> str:
    """
    Read the text content of a leaf element whose open tag was just consumed.

    Consumes through the matching close. An empty leaf (``<title></title>``)
    yields an empty string.
    """
    event = cursor.next_event()
    if isinstance(event, EndElement):
        return ""
    if isinstance(event, Characters):
        closing = cursor.next_event()
        if not isinstance(closing, EndElement):
            raise UnexpectedEvent(closing, "expected the leaf element to close after its text")
        return event.text
    raise UnexpectedEvent(event, "expected text or a close inside a leaf element")


# ---------------------------------------------------------------------------
# Attribute access
# ---------------------------------------------------------------------------

def attr(tag: StartElement, name: str) -> str:
    """Value of the first attribute named exactly ``name``."""
    for attribute in tag.attributes:
        if attribute.name == name:
            return attribute.value
    raise MissingItem(name, tag.name)


def typed_attr(tag: StartElement, name: str, decode: Callable[[str], T]) -> T:
    return decode(attr(tag, name))


def optional_attr(tag: StartElement, name: str, decode: Callable[[str], Any] = str) -> Any:
    """
    Like typed_attr, but an absent attribute yields None.

    A present attribute that fails to decode still raises BadValue.
    """
    try:
        raw = attr(tag, name)
    except MissingItem:
        return None
    return decode(raw)
