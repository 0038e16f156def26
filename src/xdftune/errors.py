"""
Parse Errors
=============
Closed failure taxonomy for XDF parsing.

Every failure aborts the whole parse. There is no partial result and no
recovery: callers either get a complete tree or one of these exceptions.
"""

from __future__ import annotations

from typing import Any


class XDFError(Exception):
    """Base class for every error raised while parsing an XDF document."""


class MissingItem(XDFError):
    """A value looked up as mandatory was absent."""

    def __init__(self, name: str, tag: str | None = None) -> None:
        self.name = name
        self.tag = tag
        where = f" on <{tag}>" if tag else ""
        super().__init__(f"missing attribute {name!r}{where}")


class BadValue(XDFError):
    """Text or an attribute was present but failed to decode."""

    def __init__(self, text: str, expected: str) -> None:
        self.text = text
        self.expected = expected
        super().__init__(f"cannot decode {text!r} as {expected}")


class UnknownType(XDFError):
    """A tag name is not recognized by the active dialect."""

    def __init__(self, name: str, dialect: str | None = None) -> None:
        self.name = name
        self.dialect = dialect
        suffix = f" in the {dialect} dialect" if dialect else ""
        super().__init__(f"unknown element <{name}>{suffix}")


class UnexpectedElement(XDFError):
    """
    A container received a child it does not declare, or an attribute-only
    element was followed by something other than its close.

    ``found`` is the offending Element (or raw event), ``container`` the
    kind of the element being built.
    """

    def __init__(self, found: Any, container: Any = None) -> None:
        self.found = found
        self.container = container
        kind = getattr(found, "kind", None)
        label = kind.value if kind is not None else type(found).__name__
        inside = f" inside {getattr(container, 'value', container)}" if container else ""
        super().__init__(f"unexpected {label}{inside}")


class UnexpectedEvent(XDFError):
    """The event stream violated the minimal shape expected at this point."""

    def __init__(self, event: Any, reason: str | None = None) -> None:
        self.event = event
        self.reason = reason
        super().__init__(reason or f"unexpected event {event!r}")


class NestingTooDeep(UnexpectedEvent):
    """Element nesting exceeded the configured depth cap."""

    def __init__(self, event: Any, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(event, f"elements nested deeper than {max_depth} levels")


class LeftoverData(XDFError):
    """Events other than the document end follow the root element."""

    def __init__(self, event: Any) -> None:
        self.event = event
        super().__init__(f"data after the root element: {event!r}")


class MarkupError(XDFError):
    """The underlying markup is malformed (wraps the tokenizer's error)."""
