"""
Element Dispatcher
===================
Turns the next event(s) of a stream into one typed Element.

Leaf elements are decoded on the spot, composite elements are handed to the
generic object builder, which calls back into ``next_element`` for each
child. The whole parse is synchronous; recursion depth follows document
nesting and is capped by ``max_depth``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from ..builder.dialects import Dialect, DialectName, get_dialect
from ..builder.object_builder import build_object
from ..errors import NestingTooDeep, UnexpectedElement, UnexpectedEvent, UnknownType
from ..markup.events import (
    EndElement,
    Event,
    EventCursor,
    StartDocument,
    StartElement,
)
from ..models.elements import Element, ElementKind
from .decoders import decode_float, decode_int, extract_text, optional_attr, typed_attr

logger = logging.getLogger(__name__)

K = ElementKind

DEFAULT_MAX_DEPTH = 64
# Deepest nesting that stays inside the default recursion limit.
MAX_DEPTH_LIMIT = 200

# Leaves whose value is the element's text content.
LEAF_DECODERS: dict[ElementKind, Callable[[str], Any]] = {
    K.TITLE: str,
    K.DEFTITLE: str,
    K.DESCRIPTION: str,
    K.UNITS: str,
    K.AUTHOR: str,
    K.FILE_VERSION: str,
    K.INDEX_COUNT: decode_int,
    K.DATA_TYPE: decode_int,
    K.UNIT_TYPE: decode_int,
    K.OUTPUT_TYPE: decode_int,
    K.DECIMAL_PL: decode_int,
    K.FLAGS: decode_int,
    K.MIN: decode_float,
    K.MAX: decode_float,
}

# Leaves whose value is a single mandatory attribute, e.g. <VAR id="X" />.
REFERENCE_ATTRIBUTES: dict[ElementKind, tuple[str, Callable[[str], Any]]] = {
    K.VAR: ("id", str),
    K.DALINK: ("index", decode_int),
}


class ElementParser:
    """
    Recursive-descent parser over an XDF event stream.

    Example::

        parser = ElementParser(iter_events("file.xdf"))
        root = parser.next_element()      # Element(kind=FORMAT, ...)
    """

    def __init__(
        self,
        events: EventCursor | Iterable[Event],
        dialect: Dialect | DialectName | str = DialectName.CURRENT,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.cursor = events if isinstance(events, EventCursor) else EventCursor(events)
        self.dialect = get_dialect(dialect)
        self.max_depth = max_depth
        self._depth = 0

    def next_element(self) -> Element:
        """
        Parse the next logical element.

        Returns a close marker (kind END) when the next event closes an
        element; the enclosing builder decides whether that ends it.
        """
        while True:
            event = self.cursor.next_event()
            if isinstance(event, StartDocument):
                continue
            if isinstance(event, StartElement):
                if self.dialect.is_ignored(event.name):
                    self._skip(event)
                    continue
                kind = self.dialect.resolve(event.name)
                if kind is None:
                    raise UnknownType(event.name, self.dialect.name.value)
                return self._dispatch(kind, event)
            if isinstance(event, EndElement):
                return Element.end(self.dialect.normalize(event.name))
            raise UnexpectedEvent(event)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, kind: ElementKind, tag: StartElement) -> Element:
        if kind in LEAF_DECODERS:
            return Element(kind=kind, value=LEAF_DECODERS[kind](extract_text(self.cursor)))
        if kind in REFERENCE_ATTRIBUTES:
            name, decode = REFERENCE_ATTRIBUTES[kind]
            element = Element(kind=kind, value=typed_attr(tag, name, decode))
            self._expect_raw_close(kind)
            return element
        if kind is K.BASE_OFFSET:
            return self._base_offset(tag)

        schema = self.dialect.schemas[kind]
        if self._depth >= self.max_depth:
            raise NestingTooDeep(tag, self.max_depth)
        self._depth += 1
        try:
            return build_object(self, schema, tag)
        finally:
            self._depth -= 1

    def _base_offset(self, tag: StartElement) -> Element:
        # <BASEOFFSET offset="0" subtract="0" /> or <baseoffset>0x0</baseoffset>
        offset = optional_attr(tag, "offset", decode_int)
        if offset is None:
            return Element(kind=K.BASE_OFFSET, value=decode_int(extract_text(self.cursor)))
        self._expect_raw_close(K.BASE_OFFSET)
        return Element(kind=K.BASE_OFFSET, value=offset)

    def _expect_raw_close(self, kind: ElementKind) -> None:
        following = self.cursor.next_event()
        if not isinstance(following, EndElement):
            raise UnexpectedElement(following, kind)

    def _skip(self, tag: StartElement) -> None:
        """Consume an ignorable container up to and including its close."""
        logger.debug("Skipping <%s>", tag.name)
        depth = 1
        while depth:
            event = self.cursor.next_event()
            if isinstance(event, StartElement):
                depth += 1
            elif isinstance(event, EndElement):
                depth -= 1
