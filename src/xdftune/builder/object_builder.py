"""
Object Builder
===============
One generic routine that assembles every composite XDF element.

Each container is described by an ObjectSchema: which child kinds fill a
single slot, which are collected into a list, which fields come from the
container's own attributes, and the tag name that closes it. The builder
asks the dispatcher for children until that close arrives and routes each
child into its slot.

Example::

    schema = ObjectSchema(
        kind=ElementKind.MATH,
        model=Math,
        closing="math",
        attributes=(AttributeField("expression", "equation"),),
        lists={ElementKind.VAR: "vars"},
    )
    element = build_object(parser, schema, start_event)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Mapping

from pydantic import BaseModel

from ..errors import UnexpectedElement
from ..markup.events import StartElement
from ..models.elements import Element, ElementKind
from ..parser.decoders import optional_attr, typed_attr

if TYPE_CHECKING:
    from ..parser.dispatcher import ElementParser


@dataclass(frozen=True)
class AttributeField:
    """A model field read from the container's own tag attributes."""
    field: str
    name: str
    decode: Callable[[str], Any] = str
    required: bool = False

    def read(self, tag: StartElement) -> Any:
        if self.required:
            return typed_attr(tag, self.name, self.decode)
        return optional_attr(tag, self.name, self.decode)


@dataclass(frozen=True)
class ObjectSchema:
    """
    Field routing for one composite element kind.

    ``closing`` is the (dialect-normalized) tag name that ends the container.
    When it is None the element is attribute-only: it is built from its
    attributes alone and the next dispatch step must be a close marker.
    """
    kind: ElementKind
    model: type[BaseModel]
    attributes: tuple[AttributeField, ...] = ()
    closing: str | None = None
    singles: Mapping[ElementKind, str] = field(default_factory=dict)
    lists: Mapping[ElementKind, str] = field(default_factory=dict)

    @property
    def has_children(self) -> bool:
        return self.closing is not None


def read_attributes(schema: ObjectSchema, tag: StartElement) -> dict[str, Any]:
    return {attribute.field: attribute.read(tag) for attribute in schema.attributes}


def build_object(parser: "ElementParser", schema: ObjectSchema, tag: StartElement) -> Element:
    """Build the element opened by ``tag`` according to ``schema``."""
    fields = read_attributes(schema, tag)
    if schema.has_children:
        fields.update(_collect_children(parser, schema))
    else:
        _expect_close(parser, schema)
    return Element(kind=schema.kind, value=schema.model(**fields))


def _collect_children(parser: "ElementParser", schema: ObjectSchema) -> dict[str, Any]:
    singles: dict[str, Any] = {}
    lists: dict[str, list[Any]] = {name: [] for name in schema.lists.values()}

    while True:
        child = parser.next_element()
        if child.kind is ElementKind.END:
            if child.value == schema.closing:
                break
            # close of something skipped earlier
            continue
        if child.kind in schema.singles:
            singles[schema.singles[child.kind]] = child.value
        elif child.kind in schema.lists:
            lists[schema.lists[child.kind]].append(child.value)
        else:
            raise UnexpectedElement(child, schema.kind)

    return {**singles, **lists}


def _expect_close(parser: "ElementParser", schema: ObjectSchema) -> None:
    following = parser.next_element()
    if not following.is_end():
        raise UnexpectedElement(following, schema.kind)
