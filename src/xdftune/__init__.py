"""
xdftune – XDF calibration definition parser
=============================================
Parses TunerPro XDF documents into an immutable, fully typed tree of
constants, tables, axes, storage descriptors and conversion formulas.

The tree describes how raw calibration data in a companion bin file should
be interpreted. Reading the bin, evaluating formulas and writing XDF back
are left to the caller.

Quick Start::

    from xdftune import ParserConfig, parse_document

    xdf = parse_document("8E0909518AK.xdf")
    print(xdf.version, xdf.header.title)

    for table in xdf.tables:
        z = table.axis("z")
        print(table.title, hex(z.embedded_data.address), z.math.expression)

    # Older files with exact-case tag names
    xdf = parse_document("old.xdf", ParserConfig(dialect="legacy"))
"""

__version__ = "0.1.0"

# Core models
from .models.elements import (
    Category,
    CategoryMem,
    Defaults,
    Element,
    ElementKind,
    EmbeddedData,
    EmbedInfo,
    Label,
    Math,
    OutputType,
    Region,
    XDFAxis,
    XDFConstant,
    XDFFormat,
    XDFHeader,
    XDFTable,
)

# Errors
from .errors import (
    BadValue,
    LeftoverData,
    MarkupError,
    MissingItem,
    NestingTooDeep,
    UnexpectedElement,
    UnexpectedEvent,
    UnknownType,
    XDFError,
)

# Dialects and configuration
from .builder.dialects import CURRENT, LEGACY, Dialect, DialectName, get_dialect
from .config import ParserConfig

# Parsing
from .markup.events import EventCursor
from .markup.reader import iter_events
from .parser.dispatcher import ElementParser
from .parser.api import parse_document, parse_element, parse_events, parse_string

__all__ = [
    # Models
    "Category",
    "CategoryMem",
    "Defaults",
    "Element",
    "ElementKind",
    "EmbeddedData",
    "EmbedInfo",
    "Label",
    "Math",
    "OutputType",
    "Region",
    "XDFAxis",
    "XDFConstant",
    "XDFFormat",
    "XDFHeader",
    "XDFTable",
    # Errors
    "BadValue",
    "LeftoverData",
    "MarkupError",
    "MissingItem",
    "NestingTooDeep",
    "UnexpectedElement",
    "UnexpectedEvent",
    "UnknownType",
    "XDFError",
    # Dialects
    "CURRENT",
    "LEGACY",
    "Dialect",
    "DialectName",
    "get_dialect",
    "ParserConfig",
    # Parsing
    "EventCursor",
    "ElementParser",
    "iter_events",
    "parse_document",
    "parse_element",
    "parse_events",
    "parse_string",
]
