"""
Parsing Entry Points
=====================
Whole-document and single-element parsing.

Example::

    from xdftune import parse_document

    xdf = parse_document("8E0909518AK.xdf")
    for table in xdf.tables:
        z = table.axis("z")
        print(table.title, z.embedded_data.address, z.math.expression)
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..builder.dialects import Dialect, DialectName
from ..config import ParserConfig
from ..errors import LeftoverData, UnexpectedElement
from ..markup.events import EndDocument, Event, EventCursor
from ..markup.reader import Source, iter_events, iter_string_events
from ..models.elements import Element, ElementKind, XDFFormat
from .dispatcher import DEFAULT_MAX_DEPTH, ElementParser

logger = logging.getLogger(__name__)


def parse_element(
    events: EventCursor | Iterable[Event],
    dialect: Dialect | DialectName | str = DialectName.CURRENT,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Element:
    """
    Parse the single element that starts at the cursor.

    At the start of a document this is the XDFFORMAT root; positioned
    anywhere else it is whatever element starts there.
    """
    return ElementParser(events, dialect, max_depth).next_element()


def parse_events(events: Iterable[Event], config: ParserConfig | None = None) -> XDFFormat:
    """
    Parse a complete document from an event stream.

    The root must be an XDFFORMAT element and nothing but the document end
    may follow it.
    """
    config = config or ParserConfig()
    cursor = events if isinstance(events, EventCursor) else EventCursor(events)
    root = parse_element(cursor, config.dialect, config.max_depth)
    if root.kind is not ElementKind.FORMAT:
        raise UnexpectedElement(root)
    for event in cursor.remaining():
        if not isinstance(event, EndDocument):
            raise LeftoverData(event)

    xdf: XDFFormat = root.value
    logger.debug(
        "Parsed XDF version %s: %d constant(s), %d table(s)",
        xdf.version, len(xdf.constants), len(xdf.tables),
    )
    return xdf


def parse_document(source: Source, config: ParserConfig | None = None) -> XDFFormat:
    """Parse an XDF document from a path, bytes or a binary file object."""
    config = config or ParserConfig()
    logger.debug("Parsing %s with the %s dialect", _describe(source), config.dialect.value)
    return parse_events(iter_events(source, config.chunk_size), config)


def parse_string(text: str, config: ParserConfig | None = None) -> XDFFormat:
    """Parse an XDF document held in memory."""
    config = config or ParserConfig()
    return parse_events(iter_string_events(text, config.chunk_size), config)


def _describe(source: Source) -> str:
    if isinstance(source, bytes):
        return f"{len(source)} bytes"
    return str(getattr(source, "name", source))
