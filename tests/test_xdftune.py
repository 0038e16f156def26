"""
Test Suite for xdftune
=======================
Tests for the value decoders, the element dispatcher, the generic object
builder, both dialects and whole-document parsing.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from lxml import etree
from pydantic import ValidationError

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xdftune import (
    CURRENT,
    LEGACY,
    BadValue,
    Element,
    ElementKind,
    EmbeddedData,
    EmbedInfo,
    EventCursor,
    Label,
    LeftoverData,
    MarkupError,
    MissingItem,
    NestingTooDeep,
    OutputType,
    ParserConfig,
    UnexpectedElement,
    UnexpectedEvent,
    UnknownType,
    XDFAxis,
    XDFError,
    XDFFormat,
    get_dialect,
    iter_events,
    parse_document,
    parse_element,
    parse_events,
    parse_string,
)
from xdftune.markup.events import (
    Attribute,
    Characters,
    EndDocument,
    EndElement,
    StartDocument,
    StartElement,
)
from xdftune.markup.reader import iter_string_events
from xdftune.models.elements import ELEMENT_VALUE_TYPES
from xdftune.parser.decoders import (
    attr,
    decode_float,
    decode_int,
    decode_signed,
    extract_text,
    optional_attr,
    typed_attr,
)
from xdftune.parser.dispatcher import LEAF_DECODERS, MAX_DEPTH_LIMIT, REFERENCE_ATTRIBUTES

DATA = Path(__file__).parent / "data"
TVUB = DATA / "tvub.xdf"


def parse_xml(xml: str, dialect: str = "current") -> Element:
    return parse_element(iter_string_events(xml), dialect)


def start(name: str, **attributes: str) -> StartElement:
    return StartElement.of(name, **attributes)


# ===========================================================================
# Fixtures
# ===========================================================================


@pytest.fixture
def tvub() -> XDFFormat:
    return parse_document(TVUB)


LEGACY_DOCUMENT = """\
<XDFFORMAT version="1.10">
  <XDFHEADER>
    <deftitle>Legacy definition</deftitle>
    <BASEOFFSET offset="0x8000" />
  </XDFHEADER>
  <XDFTABLE uniqueid="0x10">
    <title>KFMIRL</title>
    <XDFAXIS id="x">
      <LABEL index="0" value="720" />
      <LABEL index="1" value="1000" />
    </XDFAXIS>
    <XDFAXIS id="z">
      <EMBEDDEDDATA mmedaddress="0x1EF7E" mmedelementsizebits="16" mmedrowcount="16" mmedcolcount="12" />
      <MATH equation="X/4"><VAR id="X" /></MATH>
    </XDFAXIS>
  </XDFTABLE>
</XDFFORMAT>
"""


# ===========================================================================
# Value decoders
# ===========================================================================


class TestValueDecoders:

    def test_hex_and_decimal(self) -> None:
        assert decode_int("0x1F") == 31
        assert decode_int("31") == 31
        assert decode_int("0xFFFFFFFF") == 0xFFFFFFFF

    @pytest.mark.parametrize("text", ["0xZZ", "", "0x", "abc", "-1", " 5", "4294967296", "0x100000000"])
    def test_bad_unsigned(self, text: str) -> None:
        with pytest.raises(BadValue):
            decode_int(text)

    def test_signed(self) -> None:
        assert decode_signed("-32") == -32
        assert decode_signed("0x10") == 16
        with pytest.raises(BadValue):
            decode_signed("-0x10")
        with pytest.raises(BadValue):
            decode_signed("2147483648")

    def test_float(self) -> None:
        assert decode_float("255.000000") == 255.0
        assert decode_float("-0.5") == -0.5

    @pytest.mark.parametrize("text", ["", "abc", "1_0", " 1.0"])
    def test_bad_float(self, text: str) -> None:
        with pytest.raises(BadValue):
            decode_float(text)


class TestExtractText:

    def test_text_then_close(self) -> None:
        cursor = EventCursor([Characters("Foo"), EndElement("title")])
        assert extract_text(cursor) == "Foo"
        with pytest.raises(UnexpectedEvent):
            cursor.next_event()

    def test_empty_leaf(self) -> None:
        assert extract_text(EventCursor([EndElement("title")])) == ""

    def test_nested_tag_is_rejected(self) -> None:
        with pytest.raises(UnexpectedEvent):
            extract_text(EventCursor([start("b"), EndElement("b")]))

    def test_leaf_elements_from_markup(self) -> None:
        assert parse_xml("<title>Foo</title>") == Element(kind=ElementKind.TITLE, value="Foo")
        assert parse_xml("<title></title>").value == ""
        assert parse_xml("<title/>").value == ""


class TestAttributeAccess:

    def test_first_match_wins(self) -> None:
        tag = StartElement("LABEL", (Attribute("value", "a"), Attribute("value", "b")))
        assert attr(tag, "value") == "a"

    def test_missing(self) -> None:
        with pytest.raises(MissingItem) as exc:
            attr(start("VAR"), "id")
        assert exc.value.name == "id"
        assert exc.value.tag == "VAR"

    def test_typed(self) -> None:
        tag = start("DALINK", index="0x2", bad="two")
        assert typed_attr(tag, "index", decode_int) == 2
        with pytest.raises(BadValue):
            typed_attr(tag, "bad", decode_int)

    def test_optional(self) -> None:
        tag = start("CATEGORYMEM", index="0", category="z")
        assert optional_attr(tag, "missing", decode_int) is None
        assert optional_attr(tag, "index", decode_int) == 0
        with pytest.raises(BadValue):
            optional_attr(tag, "category", decode_int)


# ===========================================================================
# Element dispatcher
# ===========================================================================


class TestDispatcher:

    def test_numeric_leaves(self) -> None:
        assert parse_xml("<min>0.5</min>") == Element(kind=ElementKind.MIN, value=0.5)
        assert parse_xml("<flags>0x10</flags>").value == 16
        assert parse_xml("<decimalpl>2</decimalpl>").value == 2

    def test_bad_leaf_value(self) -> None:
        with pytest.raises(BadValue):
            parse_xml("<max>lots</max>")

    @pytest.mark.parametrize("name", ["XDFTABLE", "xdftable", "XdFtAbLe"])
    def test_current_dialect_folds_case(self, name: str) -> None:
        element = parse_xml(f"<{name}><title>T</title></{name}>")
        assert element.kind is ElementKind.TABLE
        assert element.value.title == "T"

    def test_legacy_dialect_matches_exact_case(self) -> None:
        assert parse_xml("<XDFTABLE><title>T</title></XDFTABLE>", "legacy").kind is ElementKind.TABLE
        for name in ("xdftable", "XdFtAbLe"):
            with pytest.raises(UnknownType):
                parse_xml(f"<{name}><title>T</title></{name}>", "legacy")

    def test_unknown_top_level(self) -> None:
        with pytest.raises(UnknownType) as exc:
            parse_xml("<bogus/>")
        assert exc.value.name == "bogus"

    def test_unknown_child_aborts(self) -> None:
        with pytest.raises(UnknownType):
            parse_xml("<XDFFORMAT><XDFTABLE><bogus>1</bogus></XDFTABLE></XDFFORMAT>")

    def test_ignorable_container_is_skipped(self) -> None:
        element = parse_xml(
            "<xdftable>"
            "<XDFPATCH><a><b><XDFPATCH/></b></a><c>text</c></XDFPATCH>"
            "<title>After</title>"
            "</xdftable>"
        )
        assert element.value.title == "After"

    def test_ignorable_then_element(self) -> None:
        events = [
            StartDocument(),
            start("XDFFLAG"), start("x"), EndElement("x"), EndElement("XDFFLAG"),
            start("title"), Characters("T"), EndElement("title"),
        ]
        assert parse_element(events) == Element(kind=ElementKind.TITLE, value="T")

    def test_close_marker(self) -> None:
        assert parse_element([EndElement("XDFTABLE")]) == Element.end("xdftable")
        assert parse_element([EndElement("XDFTABLE")], "legacy") == Element.end("XDFTABLE")

    @pytest.mark.parametrize("events", [[Characters("x")], [EndDocument()], []])
    def test_unexpected_event(self, events: list) -> None:
        with pytest.raises(UnexpectedEvent):
            parse_element(events)

    def test_leaf_followed_by_tag(self) -> None:
        with pytest.raises(UnexpectedEvent):
            parse_xml("<title><b/></title>")

    def test_var(self) -> None:
        assert parse_xml('<VAR id="X"/>') == Element(kind=ElementKind.VAR, value="X")
        with pytest.raises(MissingItem):
            parse_xml("<VAR/>")
        with pytest.raises(UnexpectedElement):
            parse_xml('<VAR id="X"><title>a</title></VAR>')

    def test_dalink(self) -> None:
        assert parse_xml('<DALINK index="0x2" />').value == 2
        with pytest.raises(BadValue):
            parse_xml('<DALINK index="x" />')

    def test_base_offset(self) -> None:
        assert parse_xml('<BASEOFFSET offset="0x100" subtract="0" />').value == 256
        assert parse_xml("<baseoffset>0x200</baseoffset>").value == 512
        with pytest.raises(BadValue):
            parse_xml('<baseoffset offset="zz" />')

    def test_single_element_inside_document(self) -> None:
        events = list(iter_events(TVUB))
        position = next(
            i for i, e in enumerate(events)
            if isinstance(e, StartElement) and e.name == "XDFTABLE"
        )
        element = parse_element(events[position:])
        assert element.kind is ElementKind.TABLE
        assert element.value.title == "TVUB"


# ===========================================================================
# Generic object builder
# ===========================================================================


class TestObjectBuilder:

    def test_last_singleton_wins_and_lists_keep_order(self) -> None:
        table = parse_xml(
            "<XDFTABLE>"
            "<title>A</title><XDFAXIS id='x'/><title>B</title><XDFAXIS id='y'/>"
            "<description>d</description><XDFAXIS id='z'/><title>C</title>"
            "</XDFTABLE>"
        ).value
        assert table.title == "C"
        assert table.description == "d"
        assert [a.id for a in table.axes] == ["x", "y", "z"]

    def test_header_categories(self) -> None:
        header = parse_xml(
            "<XDFHEADER>"
            "<CATEGORY index='0x0' name='Fuel'/><deftitle>one</deftitle>"
            "<CATEGORY index='0x1' name='Ignition'/><title>two</title>"
            "</XDFHEADER>"
        ).value
        assert header.title == "two"
        assert [c.name for c in header.categories] == ["Fuel", "Ignition"]
        assert header.author is None

    def test_undeclared_child(self) -> None:
        with pytest.raises(UnexpectedElement) as exc:
            parse_xml("<XDFTABLE><min>1</min></XDFTABLE>")
        assert exc.value.found.kind is ElementKind.MIN
        assert exc.value.container is ElementKind.TABLE

    def test_foreign_close_is_ignored(self) -> None:
        events = [
            start("XDFTABLE"),
            EndElement("stray"),
            start("title"), Characters("T"), EndElement("title"),
            EndElement("XDFTABLE"),
        ]
        assert parse_element(events).value.title == "T"

    def test_attribute_only_object(self) -> None:
        data = parse_xml('<EMBEDDEDDATA mmedelementsizebits="16" mmedmajorstridebits="-32" />').value
        assert data == EmbeddedData(element_size_bits=16, major_stride_bits=-32)
        assert data.address is None
        assert data.row_count is None

    def test_attribute_only_object_with_child(self) -> None:
        with pytest.raises(UnexpectedElement):
            parse_xml('<EMBEDDEDDATA mmedaddress="0x10"><title>x</title></EMBEDDEDDATA>')

    def test_bad_attribute_is_fatal(self) -> None:
        with pytest.raises(BadValue):
            parse_xml('<XDFFORMAT><XDFTABLE><XDFAXIS><EMBEDDEDDATA mmedaddress="0xZZ"/></XDFAXIS></XDFTABLE></XDFFORMAT>')

    def test_empty_container(self) -> None:
        axis = parse_xml("<XDFAXIS/>").value
        assert axis == XDFAxis()
        assert axis.labels == ()

    def test_table_flags_from_attribute_or_child(self) -> None:
        assert parse_xml('<XDFTABLE flags="0x1"><title>T</title></XDFTABLE>').value.flags == 1
        assert parse_xml('<XDFTABLE flags="0x1"><flags>0x2</flags></XDFTABLE>').value.flags == 2
        assert parse_xml("<XDFTABLE><title>T</title></XDFTABLE>").value.flags is None

    def test_absent_child_keeps_attribute_value(self) -> None:
        axis = parse_xml('<XDFAXIS id="x" uniqueid="0x7"><indexcount>3</indexcount></XDFAXIS>').value
        assert axis.uid == 7
        assert axis.units is None

    def test_math(self) -> None:
        math = parse_xml('<MATH equation="X/4"><VAR id="X"/><VAR id="Y"/></MATH>').value
        assert math.expression == "X/4"
        assert math.vars == ("X", "Y")


# ===========================================================================
# Dialects
# ===========================================================================


class TestDialects:

    def test_lookup(self) -> None:
        assert get_dialect("legacy") is LEGACY
        assert get_dialect(CURRENT) is CURRENT
        with pytest.raises(ValueError):
            get_dialect("modern")

    @pytest.mark.parametrize("dialect", [CURRENT, LEGACY])
    def test_every_tag_has_a_handler(self, dialect) -> None:
        for kind in set(dialect.tags.values()):
            assert (
                kind in LEAF_DECODERS
                or kind in REFERENCE_ATTRIBUTES
                or kind is ElementKind.BASE_OFFSET
                or kind in dialect.schemas
            ), kind

    def test_every_kind_has_a_value_type(self) -> None:
        assert set(ELEMENT_VALUE_TYPES) == set(ElementKind)

    def test_legacy_axis_requires_id(self) -> None:
        with pytest.raises(MissingItem):
            parse_xml('<XDFAXIS uniqueid="0x1"/>', "legacy")
        assert parse_xml('<XDFAXIS uniqueid="0x1"/>').value.uid == 1

    def test_legacy_math_requires_equation(self) -> None:
        with pytest.raises(MissingItem):
            parse_xml('<MATH><VAR id="X"/></MATH>', "legacy")
        assert parse_xml('<MATH><VAR id="X"/></MATH>').value.expression is None

    def test_header_title_routing(self) -> None:
        assert parse_xml("<XDFHEADER><deftitle>D</deftitle></XDFHEADER>", "legacy").value.title == "D"
        with pytest.raises(UnexpectedElement):
            parse_xml("<XDFHEADER><title>D</title></XDFHEADER>", "legacy")
        assert parse_xml("<XDFHEADER><title>D</title></XDFHEADER>").value.title == "D"

    @pytest.mark.parametrize("dialect", ["current", "legacy"])
    def test_embedinfo(self, dialect: str) -> None:
        axis = parse_xml('<XDFAXIS id="y"><embedinfo type="3" linkobjid="0x14DA9"/></XDFAXIS>', dialect).value
        assert axis.embed_info == EmbedInfo(embed_type=3, link_obj_id=0x14DA9)


# ===========================================================================
# Whole documents
# ===========================================================================


class TestDocument:

    def test_header(self, tvub: XDFFormat) -> None:
        assert tvub.version == "1.60"
        header = tvub.header
        assert header.title == "8E0909518AK 0003"
        assert header.file_version == "1.7"
        assert header.flags == 1
        assert header.base_offset == 0
        assert header.defaults.lsb_first == 1
        assert header.region.region_type == 0xFFFFFFFF
        assert [c.index for c in header.categories] == [0, 1]

    def test_constant(self, tvub: XDFFormat) -> None:
        (constant,) = tvub.constants
        assert constant.title == "CDTES"
        assert constant.uid == 0x3BFE
        assert constant.category_mem.category == 27
        assert constant.embedded_data.address == 0x181B2
        assert constant.dalink_index == 0
        assert constant.math.expression == "X"
        assert constant.output_type is None

    def test_ignorable_containers_are_dropped(self, tvub: XDFFormat) -> None:
        assert [t.title for t in tvub.tables] == ["TVUB"]

    def test_table_axes(self, tvub: XDFFormat) -> None:
        table = tvub.tables[0]
        assert table.uid == 0x14DAE
        assert table.flags == 0
        assert [a.id for a in table.axes] == ["x", "y", "z"]

        z = table.axis("z")
        assert z.embedded_data.address == 0x14DAE
        assert z.embedded_data.element_size_bits == 16
        assert z.embedded_data.row_count == 5
        assert z.embedded_data.col_count is None
        assert z.embedded_data.type_flags == 2
        assert z.math.expression == "0.000000+X*0.002667"
        assert z.math.vars == ("X",)
        assert (z.min, z.max, z.decimal_places) == (0.0, 255.0, 2)
        assert z.output_kind is OutputType.INTEGER
        assert z.is_stored

        x = table.axis("x")
        assert x.labels == (Label(index=0, value="0.00"),)
        assert x.embedded_data.major_stride_bits == -32
        assert not x.is_stored

        y = table.axis("y")
        assert y.index_count == 5
        assert y.embed_info.link_obj_id == 0x14DA9
        assert y.uid == 0
        assert z.uid is None

    def test_sources_agree(self, tvub: XDFFormat) -> None:
        raw = TVUB.read_bytes()
        assert parse_document(raw) == tvub
        assert parse_document(io.BytesIO(raw)) == tvub
        assert parse_document(str(TVUB), ParserConfig(chunk_size=7)) == tvub

    def test_legacy_dialect_reads_fixture(self, tvub: XDFFormat) -> None:
        assert parse_document(TVUB, ParserConfig(dialect="legacy")) == tvub

    def test_string_ignores_declared_encoding(self) -> None:
        text = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
            "<XDFFORMAT><XDFCONSTANT><units>\u00b0C</units></XDFCONSTANT></XDFFORMAT>"
        )
        assert parse_string(text).constants[0].units == "\u00b0C"
        assert parse_document(text.encode("latin-1")).constants[0].units == "\u00b0C"

    def test_legacy_document(self) -> None:
        xdf = parse_string(LEGACY_DOCUMENT, ParserConfig(dialect="legacy"))
        assert xdf.version == "1.10"
        assert xdf.header.title == "Legacy definition"
        assert xdf.header.base_offset == 0x8000
        table = xdf.tables[0]
        assert [label.value for label in table.axis("x").labels] == ["720", "1000"]
        z = table.axis("z")
        assert z.embedded_data.element_count() == 192
        assert z.embedded_data.size_in_bytes() == 384
        assert z.embed_info is None

    def test_root_must_be_format(self) -> None:
        with pytest.raises(UnexpectedElement):
            parse_string("<XDFTABLE><title>T</title></XDFTABLE>")

    def test_leftover_data(self) -> None:
        events = [
            StartDocument(),
            start("XDFFORMAT"), EndElement("XDFFORMAT"),
            start("title"), Characters("x"), EndElement("title"),
            EndDocument(),
        ]
        with pytest.raises(LeftoverData):
            parse_events(events)

    def test_malformed_markup(self) -> None:
        with pytest.raises(MarkupError) as exc:
            parse_string("<XDFFORMAT><title>x</XDFFORMAT>")
        assert isinstance(exc.value, XDFError)
        assert isinstance(exc.value.__cause__, etree.XMLSyntaxError)

    def test_depth_cap(self) -> None:
        with pytest.raises(NestingTooDeep) as exc:
            parse_document(TVUB, ParserConfig(max_depth=2))
        assert isinstance(exc.value, UnexpectedEvent)
        assert exc.value.max_depth == 2

    def test_invalid_config(self) -> None:
        with pytest.raises(ValidationError):
            ParserConfig(max_depth=0)
        with pytest.raises(ValidationError):
            ParserConfig(max_depth=10_000)
        assert ParserConfig(max_depth=MAX_DEPTH_LIMIT).max_depth == MAX_DEPTH_LIMIT


# ===========================================================================
# Models
# ===========================================================================


class TestModels:

    def test_embedded_data_helpers(self) -> None:
        data = EmbeddedData(address=0x10, element_size_bits=8, row_count=8, col_count=16)
        assert data.is_stored
        assert data.element_count() == 128
        assert data.size_in_bytes() == 128
        assert EmbeddedData().element_count() == 1
        assert EmbeddedData().size_in_bytes() is None
        assert not EmbeddedData().is_stored

    def test_models_are_frozen(self, tvub: XDFFormat) -> None:
        with pytest.raises(ValidationError):
            tvub.tables[0].title = "changed"

    def test_element_value_type_is_checked(self) -> None:
        with pytest.raises(ValidationError):
            Element(kind=ElementKind.TITLE, value=3)
        with pytest.raises(ValidationError):
            Element(kind=ElementKind.TABLE, value=XDFAxis())

    def test_close_marker(self) -> None:
        marker = Element.end("xdfaxis")
        assert marker.is_end()
        assert marker.is_end("xdfaxis")
        assert not marker.is_end("xdftable")

    def test_unknown_output_type(self) -> None:
        assert XDFAxis(output_type=9).output_kind is None
        assert XDFAxis().output_kind is None
