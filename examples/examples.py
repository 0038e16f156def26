"""
Examples for xdftune
====================
Three short examples: a whole definition file, a single element, and the
strict error behaviour.

Run:
    python examples/examples.py
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xdftune import (
    ParserConfig,
    XDFError,
    parse_document,
    parse_element,
    parse_string,
)
from xdftune.markup.reader import iter_string_events

DEFINITION = Path(__file__).parent.parent / "tests" / "data" / "tvub.xdf"


# ---------------------------------------------------------------------------
# Example 1: Whole document
# ---------------------------------------------------------------------------


def example_document() -> None:
    """
    Example 1: List every table with the location and formula of its values.

    The z axis of a table holds the stored values; x and y label them.
    """
    print("\n" + "="*60)
    print("EXAMPLE 1: Tables and constants")
    print("="*60)

    xdf = parse_document(DEFINITION)
    print(f"  {xdf!r}")
    print(f"  Title: {xdf.header.title}")

    for table in xdf.tables:
        z = table.axis("z")
        data = z.embedded_data
        print(f"  {table.title}: {data.element_count()} value(s) of {data.element_size_bits} bits "
              f"at {data.address:#x}, shown as {z.math.expression}")

    for constant in xdf.constants:
        print(f"  {constant.title}: at {constant.embedded_data.address:#x}")
    print("  ✓ Example 1 complete")


# ---------------------------------------------------------------------------
# Example 2: Single element
# ---------------------------------------------------------------------------


def example_single_element() -> None:
    """Example 2: Parse one axis fragment without a surrounding document."""
    print("\n" + "="*60)
    print("EXAMPLE 2: Single element")
    print("="*60)

    element = parse_element(iter_string_events(
        '<XDFAXIS id="x"><LABEL index="0" value="720" /><LABEL index="1" value="1000" /></XDFAXIS>'
    ))
    print(f"  Kind: {element.kind.value}")
    print(f"  Labels: {[label.value for label in element.value.labels]}")
    print("  ✓ Example 2 complete")


# ---------------------------------------------------------------------------
# Example 3: Strict parsing
# ---------------------------------------------------------------------------


def example_errors() -> None:
    """Example 3: Any unexpected content aborts the parse."""
    print("\n" + "="*60)
    print("EXAMPLE 3: Errors")
    print("="*60)

    documents = {
        "unknown tag": "<XDFFORMAT><XDFTHING /></XDFFORMAT>",
        "misplaced child": "<XDFFORMAT><min>1</min></XDFFORMAT>",
        "bad address": '<XDFFORMAT><XDFCONSTANT><EMBEDDEDDATA mmedaddress="0xZZ" /></XDFCONSTANT></XDFFORMAT>',
        "legacy case": "<xdfformat />",
    }
    for label, text in documents.items():
        config = ParserConfig(dialect="legacy") if label == "legacy case" else None
        try:
            parse_string(text, config)
        except XDFError as exc:
            print(f"  {label}: {type(exc).__name__}: {exc}")
    print("  ✓ Example 3 complete")


# ---------------------------------------------------------------------------
# Run all examples
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    example_document()
    example_single_element()
    example_errors()

    print("\n" + "="*60)
    print("All examples completed successfully.")
    print("="*60 + "\n")
