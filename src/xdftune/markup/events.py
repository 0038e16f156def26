"""
Markup Events
==============
The event stream consumed by the element parser, and a cursor over it.

The stream is assumed to be well formed: comments stripped, CDATA merged
into text, consecutive text runs coalesced and whitespace trimmed. Any
tokenizer that yields these events can drive the parser; see
``xdftune.markup.reader`` for the bundled lxml adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from ..errors import UnexpectedEvent


@dataclass(frozen=True)
class Attribute:
    name: str
    value: str


@dataclass(frozen=True)
class StartDocument:
    pass


@dataclass(frozen=True)
class EndDocument:
    pass


@dataclass(frozen=True)
class StartElement:
    """A tag-open event. Attributes keep document order."""
    name: str
    attributes: tuple[Attribute, ...] = ()

    @classmethod
    def of(cls, name: str, **attributes: str) -> "StartElement":
        """Shorthand for building a tag-open event from keyword attributes."""
        return cls(name, tuple(Attribute(k, v) for k, v in attributes.items()))


@dataclass(frozen=True)
class Characters:
    text: str


@dataclass(frozen=True)
class EndElement:
    name: str


Event = Union[StartDocument, EndDocument, StartElement, Characters, EndElement]


class EventCursor:
    """
    Forward-only cursor over an event stream.

    Reading past the end of the stream is a protocol violation and raises
    UnexpectedEvent with ``event=None``.
    """

    def __init__(self, events: Iterable[Event]) -> None:
        self._events: Iterator[Event] = iter(events)

    def next_event(self) -> Event:
        try:
            return next(self._events)
        except StopIteration:
            raise UnexpectedEvent(None, "event stream ended before the element was closed") from None

    def remaining(self) -> Iterator[Event]:
        """Yield every event not consumed yet."""
        yield from self._events
