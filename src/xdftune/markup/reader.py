"""
Markup Reader
==============
Turns XDF markup into the event stream expected by the element parser.

Built on ``lxml.etree.XMLParser`` with a parser target: the document is fed
to libxml2 in chunks and structural events are handed on as soon as they
are produced, so large definition files are never held as a tree.

Example::

    from xdftune.markup.reader import iter_events

    for event in iter_events("8E0909518AK.xdf"):
        print(event)
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Any, Iterator, Union

from lxml import etree

from ..errors import MarkupError
from .events import (
    Attribute,
    Characters,
    EndDocument,
    EndElement,
    Event,
    StartDocument,
    StartElement,
)

Source = Union[str, Path, bytes, IO[bytes]]

DEFAULT_CHUNK_SIZE = 64 * 1024


def _local(name: str) -> str:
    return etree.QName(name).localname


class _EventCollector:
    """Parser target that records events and coalesces text runs."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._text: list[str] = []

    def start(self, tag: str, attrib: dict[str, str], nsmap: Any = None) -> None:
        self._flush_text()
        attributes = tuple(Attribute(_local(k), v) for k, v in attrib.items())
        self._events.append(StartElement(_local(tag), attributes))

    def end(self, tag: str) -> None:
        self._flush_text()
        self._events.append(EndElement(_local(tag)))

    def data(self, data: str) -> None:
        self._text.append(data)

    def close(self) -> None:
        self._flush_text()

    def drain(self) -> list[Event]:
        events, self._events = self._events, []
        return events

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = "".join(self._text).strip()
        self._text = []
        if text:
            self._events.append(Characters(text))


def _chunks(source: Source, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, bytes):
        yield source
        return
    if isinstance(source, (str, Path)):
        with open(source, "rb") as fh:
            yield from _chunks(fh, chunk_size)
        return
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return
        yield chunk


def iter_events(
    source: Source,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str | None = None,
) -> Iterator[Event]:
    """
    Yield the events of an XDF document.

    Parameters
    ----------
    source:
        A file path, the raw document bytes, or a binary file object.
    chunk_size:
        Number of bytes fed to the parser at a time.
    encoding:
        Overrides the encoding named in the XML declaration. Left as None,
        the declaration (or UTF-8 without one) decides.

    Raises MarkupError when the markup itself is malformed.
    """
    collector = _EventCollector()
    parser = etree.XMLParser(
        target=collector,
        remove_comments=True,
        remove_pis=True,
        resolve_entities=False,
        no_network=True,
        encoding=encoding,
    )
    yield StartDocument()
    try:
        for chunk in _chunks(source, chunk_size):
            parser.feed(chunk)
            yield from collector.drain()
        parser.close()
    except etree.XMLSyntaxError as exc:
        raise MarkupError(str(exc)) from exc
    yield from collector.drain()
    yield EndDocument()


def iter_string_events(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Event]:
    """
    Same as iter_events for a document held in a str.

    The text is already decoded, so any encoding in its XML declaration is
    ignored.
    """
    return iter_events(io.BytesIO(text.encode("utf-8")), chunk_size, encoding="utf-8")
