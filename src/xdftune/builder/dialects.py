"""
Dialects
=========
The two tag naming conventions found in XDF files.

``current``
    Tag names are matched after lower-casing, so ``<XDFTABLE>``,
    ``<xdftable>`` and ``<XdFtAbLe>`` are the same element.
``legacy``
    Tag names are matched exactly as older TunerPro versions wrote them:
    containers and attribute-only tags in upper case, text leaves in lower
    case.

Besides case, the dialects differ in which attributes are mandatory and in
how the header title is routed. They are kept as two separate
tables on purpose; only one is active per parse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from ..models.elements import (
    Category,
    CategoryMem,
    Defaults,
    ElementKind,
    EmbeddedData,
    EmbedInfo,
    Label,
    Math,
    Region,
    XDFAxis,
    XDFConstant,
    XDFFormat,
    XDFHeader,
    XDFTable,
)
from ..parser.decoders import decode_int, decode_signed
from .object_builder import AttributeField, ObjectSchema

K = ElementKind


class DialectName(str, Enum):
    CURRENT = "current"
    LEGACY = "legacy"


@dataclass(frozen=True)
class Dialect:
    """
    Tag recognition and field routing for one naming convention.

    ``tags`` maps normalized tag names to element kinds, ``ignored`` lists
    containers skipped wholesale, ``schemas`` holds the builder schema of
    every composite kind.
    """
    name: DialectName
    fold_case: bool
    tags: Mapping[str, ElementKind]
    ignored: frozenset[str]
    schemas: Mapping[ElementKind, ObjectSchema] = field(default_factory=dict)

    def normalize(self, tag_name: str) -> str:
        return tag_name.lower() if self.fold_case else tag_name

    def resolve(self, tag_name: str) -> ElementKind | None:
        return self.tags.get(self.normalize(tag_name))

    def is_ignored(self, tag_name: str) -> bool:
        return self.normalize(tag_name) in self.ignored


# ---------------------------------------------------------------------------
# Attribute-only objects (identical routing in both dialects)
# ---------------------------------------------------------------------------

def _attribute_schemas() -> dict[ElementKind, ObjectSchema]:
    return {
        K.LABEL: ObjectSchema(K.LABEL, Label, (
            AttributeField("index", "index", decode_int),
            AttributeField("value", "value"),
        )),
        K.EMBED_INFO: ObjectSchema(K.EMBED_INFO, EmbedInfo, (
            AttributeField("embed_type", "type", decode_int),
            AttributeField("link_obj_id", "linkobjid", decode_int),
        )),
        K.DEFAULTS: ObjectSchema(K.DEFAULTS, Defaults, (
            AttributeField("data_size_bits", "datasizeinbits", decode_int),
            AttributeField("sig_digits", "sigdigits", decode_int),
            AttributeField("output_type", "outputtype", decode_int),
            AttributeField("signed", "signed", decode_int),
            AttributeField("lsb_first", "lsbfirst", decode_int),
            AttributeField("is_float", "float", decode_int),
        )),
        K.CATEGORY: ObjectSchema(K.CATEGORY, Category, (
            AttributeField("index", "index", decode_int),
            AttributeField("name", "name"),
        )),
        K.REGION: ObjectSchema(K.REGION, Region, (
            AttributeField("region_type", "type", decode_int),
            AttributeField("start_address", "startaddress", decode_int),
            AttributeField("size", "size", decode_int),
            AttributeField("flags", "regionflags", decode_int),
        )),
        K.CATEGORY_MEM: ObjectSchema(K.CATEGORY_MEM, CategoryMem, (
            AttributeField("index", "index", decode_int),
            AttributeField("category", "category", decode_int),
        )),
        K.EMBEDDED_DATA: ObjectSchema(K.EMBEDDED_DATA, EmbeddedData, (
            AttributeField("address", "mmedaddress", decode_int),
            AttributeField("element_size_bits", "mmedelementsizebits", decode_int),
            AttributeField("major_stride_bits", "mmedmajorstridebits", decode_signed),
            AttributeField("minor_stride_bits", "mmedminorstridebits", decode_signed),
            AttributeField("type_flags", "mmedtypeflags", decode_int),
            AttributeField("row_count", "mmedrowcount", decode_int),
            AttributeField("col_count", "mmedcolcount", decode_int),
        )),
    }


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

_AXIS_SINGLES = {
    K.EMBEDDED_DATA: "embedded_data",
    K.MIN: "min",
    K.MAX: "max",
    K.OUTPUT_TYPE: "output_type",
    K.DATA_TYPE: "data_type",
    K.UNIT_TYPE: "unit_type",
    K.DALINK: "dalink_index",
    K.INDEX_COUNT: "index_count",
    K.DECIMAL_PL: "decimal_places",
    K.MATH: "math",
    K.UNITS: "units",
    K.EMBED_INFO: "embed_info",
}

_HEADER_SINGLES = {
    K.DESCRIPTION: "description",
    K.BASE_OFFSET: "base_offset",
    K.DEFAULTS: "defaults",
    K.REGION: "region",
    K.FLAGS: "flags",
    K.FILE_VERSION: "file_version",
    K.AUTHOR: "author",
}


def _container_schemas(closing: Mapping[ElementKind, str], legacy: bool) -> dict[ElementKind, ObjectSchema]:
    header_title = K.DEFTITLE if legacy else K.TITLE

    return {
        K.MATH: ObjectSchema(
            K.MATH, Math,
            attributes=(AttributeField("expression", "equation", required=legacy),),
            closing=closing[K.MATH],
            lists={K.VAR: "vars"},
        ),
        K.HEADER: ObjectSchema(
            K.HEADER, XDFHeader,
            closing=closing[K.HEADER],
            singles={header_title: "title", **_HEADER_SINGLES},
            lists={K.CATEGORY: "categories"},
        ),
        K.AXIS: ObjectSchema(
            K.AXIS, XDFAxis,
            attributes=(
                AttributeField("id", "id", required=legacy),
                AttributeField("uid", "uniqueid", decode_int),
            ),
            closing=closing[K.AXIS],
            singles=_AXIS_SINGLES,
            lists={K.LABEL: "labels"},
        ),
        K.TABLE: ObjectSchema(
            K.TABLE, XDFTable,
            attributes=(
                AttributeField("uid", "uniqueid", decode_int),
                AttributeField("flags", "flags", decode_int),
            ),
            closing=closing[K.TABLE],
            singles={
                K.TITLE: "title",
                K.FLAGS: "flags",
                K.DESCRIPTION: "description",
                K.CATEGORY_MEM: "category_mem",
            },
            lists={K.AXIS: "axes"},
        ),
        K.CONSTANT: ObjectSchema(
            K.CONSTANT, XDFConstant,
            attributes=(AttributeField("uid", "uniqueid", decode_int),),
            closing=closing[K.CONSTANT],
            singles={
                K.EMBEDDED_DATA: "embedded_data",
                K.TITLE: "title",
                K.DESCRIPTION: "description",
                K.OUTPUT_TYPE: "output_type",
                K.DATA_TYPE: "data_type",
                K.DECIMAL_PL: "decimal_places",
                K.UNIT_TYPE: "unit_type",
                K.UNITS: "units",
                K.MATH: "math",
                K.DALINK: "dalink_index",
                K.CATEGORY_MEM: "category_mem",
            },
        ),
        K.FORMAT: ObjectSchema(
            K.FORMAT, XDFFormat,
            attributes=(AttributeField("version", "version"),),
            closing=closing[K.FORMAT],
            singles={K.HEADER: "header"},
            lists={K.CONSTANT: "constants", K.TABLE: "tables"},
        ),
    }


# ---------------------------------------------------------------------------
# Tag tables
# ---------------------------------------------------------------------------

_CURRENT_TAGS: dict[str, ElementKind] = {
    "title": K.TITLE,
    "deftitle": K.TITLE,
    "description": K.DESCRIPTION,
    "units": K.UNITS,
    "author": K.AUTHOR,
    "fileversion": K.FILE_VERSION,
    "indexcount": K.INDEX_COUNT,
    "datatype": K.DATA_TYPE,
    "unittype": K.UNIT_TYPE,
    "outputtype": K.OUTPUT_TYPE,
    "decimalpl": K.DECIMAL_PL,
    "flags": K.FLAGS,
    "min": K.MIN,
    "max": K.MAX,
    "baseoffset": K.BASE_OFFSET,
    "dalink": K.DALINK,
    "var": K.VAR,
    "embedinfo": K.EMBED_INFO,
    "defaults": K.DEFAULTS,
    "category": K.CATEGORY,
    "region": K.REGION,
    "categorymem": K.CATEGORY_MEM,
    "embeddeddata": K.EMBEDDED_DATA,
    "label": K.LABEL,
    "math": K.MATH,
    "xdfformat": K.FORMAT,
    "xdfheader": K.HEADER,
    "xdftable": K.TABLE,
    "xdfaxis": K.AXIS,
    "xdfconstant": K.CONSTANT,
}

_LEGACY_TAGS: dict[str, ElementKind] = {
    "title": K.TITLE,
    "deftitle": K.DEFTITLE,
    "description": K.DESCRIPTION,
    "units": K.UNITS,
    "author": K.AUTHOR,
    "fileversion": K.FILE_VERSION,
    "indexcount": K.INDEX_COUNT,
    "datatype": K.DATA_TYPE,
    "unittype": K.UNIT_TYPE,
    "outputtype": K.OUTPUT_TYPE,
    "decimalpl": K.DECIMAL_PL,
    "flags": K.FLAGS,
    "min": K.MIN,
    "max": K.MAX,
    "embedinfo": K.EMBED_INFO,
    "BASEOFFSET": K.BASE_OFFSET,
    "DALINK": K.DALINK,
    "VAR": K.VAR,
    "DEFAULTS": K.DEFAULTS,
    "CATEGORY": K.CATEGORY,
    "REGION": K.REGION,
    "CATEGORYMEM": K.CATEGORY_MEM,
    "EMBEDDEDDATA": K.EMBEDDED_DATA,
    "LABEL": K.LABEL,
    "MATH": K.MATH,
    "XDFFORMAT": K.FORMAT,
    "XDFHEADER": K.HEADER,
    "XDFTABLE": K.TABLE,
    "XDFAXIS": K.AXIS,
    "XDFCONSTANT": K.CONSTANT,
}


def _closing_names(tags: Mapping[str, ElementKind]) -> dict[ElementKind, str]:
    return {kind: name for name, kind in tags.items()}


CURRENT = Dialect(
    name=DialectName.CURRENT,
    fold_case=True,
    tags=_CURRENT_TAGS,
    ignored=frozenset({"xdfpatch", "xdfflag", "xdfchecksum"}),
    schemas={**_attribute_schemas(), **_container_schemas(_closing_names(_CURRENT_TAGS), legacy=False)},
)

LEGACY = Dialect(
    name=DialectName.LEGACY,
    fold_case=False,
    tags=_LEGACY_TAGS,
    ignored=frozenset({"XDFPATCH", "XDFFLAG", "XDFCHECKSUM"}),
    schemas={**_attribute_schemas(), **_container_schemas(_closing_names(_LEGACY_TAGS), legacy=True)},
)

DIALECTS: dict[DialectName, Dialect] = {
    DialectName.CURRENT: CURRENT,
    DialectName.LEGACY: LEGACY,
}


def get_dialect(dialect: Dialect | DialectName | str) -> Dialect:
    """Look up a dialect by name; Dialect instances are returned as-is."""
    if isinstance(dialect, Dialect):
        return dialect
    return DIALECTS[DialectName(dialect)]
