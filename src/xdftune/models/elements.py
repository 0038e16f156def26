"""
XDF Elements – Core Model
==========================
Typed representation of the elements found in a TunerPro XDF definition.

An XDF describes how to interpret a raw calibration image (a "bin"): which
bytes form a constant or a table, how many bits each value occupies, and the
formula that turns a stored value into the displayed one.

All models are frozen. Fields absent from the document are ``None`` (or an
empty tuple for repeated children); nothing is defaulted to zero. Identifier
fields (``uid``, ``link_obj_id``, ``dalink_index``) are plain keys: the format
does not guarantee they are unique and they are never resolved here.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class OutputType(IntEnum):
    """
    How values are shown to the user.

    The numbering is not documented by TunerPro and may be wrong; the raw
    ``output_type`` integer is always kept alongside.
    """
    FLOAT = 0
    INTEGER = 1
    HEX = 2
    STRING = 3


class ElementKind(str, Enum):
    """Every kind of element a dispatch step can produce."""
    END = "end"
    # Text leaves
    TITLE = "title"
    DEFTITLE = "deftitle"
    DESCRIPTION = "description"
    FILE_VERSION = "fileversion"
    AUTHOR = "author"
    UNITS = "units"
    # Numeric leaves
    FLAGS = "flags"
    BASE_OFFSET = "baseoffset"
    DATA_TYPE = "datatype"
    UNIT_TYPE = "unittype"
    OUTPUT_TYPE = "outputtype"
    DECIMAL_PL = "decimalpl"
    INDEX_COUNT = "indexcount"
    MIN = "min"
    MAX = "max"
    # Attribute-only references
    DALINK = "dalink"
    VAR = "var"
    # Attribute-only objects
    LABEL = "label"
    EMBED_INFO = "embedinfo"
    DEFAULTS = "defaults"
    CATEGORY = "category"
    REGION = "region"
    CATEGORY_MEM = "categorymem"
    EMBEDDED_DATA = "embeddeddata"
    # Containers
    MATH = "math"
    HEADER = "xdfheader"
    AXIS = "xdfaxis"
    TABLE = "xdftable"
    CONSTANT = "xdfconstant"
    FORMAT = "xdfformat"


# ---------------------------------------------------------------------------
# Attribute-only objects
# ---------------------------------------------------------------------------

class Region(BaseModel):
    """Memory region declared in the header. Purpose not documented."""
    model_config = ConfigDict(frozen=True)

    region_type: int | None = None
    start_address: int | None = None
    size: int | None = None
    flags: int | None = None


class Defaults(BaseModel):
    """Default storage settings for items, declared in the header."""
    model_config = ConfigDict(frozen=True)

    data_size_bits: int | None = Field(None, description="Default element size in bits")
    sig_digits: int | None = Field(None, description="Default significant digits")
    output_type: int | None = None
    signed: int | None = None
    lsb_first: int | None = Field(None, description="Non-zero for little-endian storage")
    is_float: int | None = Field(None, description="Non-zero when values are stored as floats")


class Category(BaseModel):
    """A named category used to group items in a tree view."""
    model_config = ConfigDict(frozen=True)

    index: int | None = None
    name: str | None = None


class CategoryMem(BaseModel):
    """Places a table or constant into a category. Opaque to the parser."""
    model_config = ConfigDict(frozen=True)

    index: int | None = None
    category: int | None = None


class Label(BaseModel):
    """One externally defined axis label (not stored in the bin)."""
    model_config = ConfigDict(frozen=True)

    index: int | None = None
    value: str | None = None


class EmbedInfo(BaseModel):
    """
    Marks an axis whose values live in another object.

    Example: ``<embedinfo type="3" linkobjid="0x14DA9" />``. Both codes are
    passed through uninterpreted.
    """
    model_config = ConfigDict(frozen=True)

    embed_type: int | None = None
    link_obj_id: int | None = Field(None, description="Unique id of the linked object")


class EmbeddedData(BaseModel):
    """
    Where and how values are stored in the bin.

    Without an address the item is not read from the bin at all. When both
    row and column counts exceed one, storage is row-major within a single
    one-dimensional byte range: every column of a row is written before the
    next row starts.
    """
    model_config = ConfigDict(frozen=True)

    address: int | None = Field(None, description="Offset of the first element in the bin")
    element_size_bits: int | None = Field(None, description="Size of each element in bits")
    major_stride_bits: int | None = None
    minor_stride_bits: int | None = None
    type_flags: int | None = Field(None, description="Uninterpreted storage flags")
    row_count: int | None = None
    col_count: int | None = None

    @property
    def is_stored(self) -> bool:
        """True when the values are backed by the bin."""
        return self.address is not None

    def element_count(self) -> int:
        """Number of stored elements; absent counts read as one."""
        return (self.row_count or 1) * (self.col_count or 1)

    def size_in_bytes(self) -> int | None:
        """Length of the byte range, or None when the element size is unspecified."""
        if self.element_size_bits is None:
            return None
        return self.element_count() * self.element_size_bits // 8


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

class Math(BaseModel):
    """
    Conversion between a stored value and the displayed one.

    Example: ``<MATH equation="0.000000+X*0.002667"><VAR id="X" /></MATH>``.
    The expression is kept as text and never evaluated.
    """
    model_config = ConfigDict(frozen=True)

    vars: tuple[str, ...] = Field(default_factory=tuple, description="Variable names, usually just X")
    expression: str | None = None


class XDFHeader(BaseModel):
    """File level information: origin, defaults and categories."""
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    file_version: str | None = None
    author: str | None = None
    base_offset: int | None = None
    defaults: Defaults | None = None
    region: Region | None = None
    flags: int | None = None
    categories: tuple[Category, ...] = Field(default_factory=tuple)


class XDFAxis(BaseModel):
    """
    One dimension of a table.

    An axis is either labelled externally (``labels``) or stored in the bin
    (``embedded_data``). Both fields are independently optional and their
    exclusivity is not checked.
    """
    model_config = ConfigDict(frozen=True)

    id: str | None = Field(None, description="Axis name, usually x, y or z")
    uid: int | None = None
    embedded_data: EmbeddedData | None = None
    data_type: int | None = None
    unit_type: int | None = None
    dalink_index: int | None = None
    math: Math | None = None
    index_count: int | None = Field(None, description="Number of items on the axis")
    labels: tuple[Label, ...] = Field(default_factory=tuple)
    min: float | None = None
    max: float | None = None
    output_type: int | None = None
    decimal_places: int | None = None
    units: str | None = None
    embed_info: EmbedInfo | None = None

    @property
    def is_stored(self) -> bool:
        return self.embedded_data is not None and self.embedded_data.is_stored

    @property
    def output_kind(self) -> OutputType | None:
        return _output_kind(self.output_type)


class XDFTable(BaseModel):
    """
    A table, usually made of three axes: x and y label the rows and
    columns, z holds the values.
    """
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    uid: int | None = None
    flags: int | None = Field(None, description="Uninterpreted table flags")
    description: str | None = None
    category_mem: CategoryMem | None = None
    axes: tuple[XDFAxis, ...] = Field(default_factory=tuple)

    def axis(self, axis_id: str) -> XDFAxis | None:
        """First axis of this table with the given id."""
        for axis in self.axes:
            if axis.id == axis_id:
                return axis
        return None

    def __repr__(self) -> str:
        return f"XDFTable(title={self.title!r}, uid={self.uid!r}, axes={len(self.axes)})"


class XDFConstant(BaseModel):
    """A single stored value with its conversion and display settings."""
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    uid: int | None = None
    category_mem: CategoryMem | None = None
    embedded_data: EmbeddedData | None = None
    decimal_places: int | None = None
    data_type: int | None = None
    unit_type: int | None = None
    output_type: int | None = None
    units: str | None = None
    dalink_index: int | None = None
    math: Math | None = None

    @property
    def output_kind(self) -> OutputType | None:
        return _output_kind(self.output_type)


class XDFFormat(BaseModel):
    """A complete XDF document."""
    model_config = ConfigDict(frozen=True)

    version: str | None = None
    header: XDFHeader | None = None
    constants: tuple[XDFConstant, ...] = Field(default_factory=tuple)
    tables: tuple[XDFTable, ...] = Field(default_factory=tuple)

    def __repr__(self) -> str:
        return (
            f"XDFFormat(version={self.version!r}, constants={len(self.constants)}, "
            f"tables={len(self.tables)})"
        )


def _output_kind(raw: int | None) -> OutputType | None:
    if raw is None:
        return None
    try:
        return OutputType(raw)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Element – the result of one dispatch step
# ---------------------------------------------------------------------------

ELEMENT_VALUE_TYPES: dict[ElementKind, type | tuple[type, ...]] = {
    ElementKind.END: str,
    ElementKind.TITLE: str,
    ElementKind.DEFTITLE: str,
    ElementKind.DESCRIPTION: str,
    ElementKind.FILE_VERSION: str,
    ElementKind.AUTHOR: str,
    ElementKind.UNITS: str,
    ElementKind.FLAGS: int,
    ElementKind.BASE_OFFSET: int,
    ElementKind.DATA_TYPE: int,
    ElementKind.UNIT_TYPE: int,
    ElementKind.OUTPUT_TYPE: int,
    ElementKind.DECIMAL_PL: int,
    ElementKind.INDEX_COUNT: int,
    ElementKind.MIN: float,
    ElementKind.MAX: float,
    ElementKind.DALINK: int,
    ElementKind.VAR: str,
    ElementKind.LABEL: Label,
    ElementKind.EMBED_INFO: EmbedInfo,
    ElementKind.DEFAULTS: Defaults,
    ElementKind.CATEGORY: Category,
    ElementKind.REGION: Region,
    ElementKind.CATEGORY_MEM: CategoryMem,
    ElementKind.EMBEDDED_DATA: EmbeddedData,
    ElementKind.MATH: Math,
    ElementKind.HEADER: XDFHeader,
    ElementKind.AXIS: XDFAxis,
    ElementKind.TABLE: XDFTable,
    ElementKind.CONSTANT: XDFConstant,
    ElementKind.FORMAT: XDFFormat,
}


class Element(BaseModel):
    """
    One parsed element: a kind and the value registered for that kind.

    ``END`` elements are close markers carrying the closed tag name.
    """
    model_config = ConfigDict(frozen=True)

    kind: ElementKind
    value: Any

    @model_validator(mode="after")
    def validate_value_type(self) -> "Element":
        expected = ELEMENT_VALUE_TYPES[self.kind]
        if not isinstance(self.value, expected):
            raise ValueError(
                f"{self.kind.value} elements carry {expected}, got {type(self.value).__name__}"
            )
        return self

    @classmethod
    def end(cls, name: str) -> "Element":
        return cls(kind=ElementKind.END, value=name)

    def is_end(self, name: str | None = None) -> bool:
        """True for a close marker, optionally for a specific tag name."""
        return self.kind is ElementKind.END and (name is None or self.value == name)
