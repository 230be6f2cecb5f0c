#!/usr/bin/env python3
"""
Reading PICA+ records and querying fields with locators

This example parses a PICA+ record (from a file given on the command line,
standard input, or the bundled test fixture) and shows the main ways to get
data out of it: field access, locator queries with cardinality checks,
value filters and mapping a record to a dictionary.

Usage:
    python examples/reading_and_querying.py [record.pica]
    cat record.pica | python examples/reading_and_querying.py -
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pica import Record


def load_record(argv):
    """
    Read a record from the path in argv, from stdin with "-", or fall back
    to the sample record of the test suite.
    """
    if len(argv) > 1:
        if argv[1] == "-":
            return Record.parse(sys.stdin.read())
        return Record.parse(Path(argv[1]).read_text(encoding="utf-8"))

    sample = Path(__file__).parent.parent / "tests" / "data" / "fixtures" / "sample.pica"
    if sample.exists():
        return Record.parse(sample.read_text(encoding="utf-8"))

    print("No sample record found. Creating synthetic example...")
    print()
    return Record.parse(
        "003@ $0123456789\n"
        "010@ $ager\n"
        "021A $aA title$hJane Doe\n"
        "028A $dJane$aDoe\n"
        "041A $8Subject one\n"
        "041A/01 $8Subject two\n"
    )


def field_access(record):
    """
    Demonstrate access to fields and their subfields.
    """
    print("=== Field Access ===\n")

    field = record.first("021A")        # alternatively: record["021A"]
    if field is not None and field.ok:
        print(f"Tag:        {field.tag}")
        print(f"Occurrence: {field.occurrence!r}")
        print(f"Full tag:   {field.full_tag}")
        print(f"Title:      {field['a']}")
        print(f"Codes:      {field.codes()}")

    print(f"\nPPN: {record.first('003@', '0')}")
    print(f"Tags: {', '.join(record.tags)}")
    print()


def locator_queries(record):
    """
    Demonstrate occurrences, alternatives and cardinality prefixes.
    """
    print("=== Locator Queries ===\n")

    # all persons from main entry and further contributors
    for field in record.all("028A|028C"):
        print(f"  {field.full_tag}: {field.join(' ', 'da')}")

    # only fields without occurrence
    print(f"\nSubjects without occurrence: {record.all('041A/$8')}")

    # exactly one title, errors are returned, not raised
    title, error = record.get("!021A$a")
    print(f"\nExactly one title: {title!r} (error: {error})")

    persons, error = record.get("!028C$a")
    print(f"Exactly one 028C: {persons!r} (error: {error})")
    print()


def filtered_queries(record):
    """
    Demonstrate value filters.
    """
    print("=== Filters ===\n")

    ddc = record.all("045E$a|045F$a", filters={"find": r"^DDC([\d.]+)$", "format": "ddc:{}"})
    print(f"Classification: {ddc}")

    linked = record.all("009P", filters=lambda f: f.first("3") is not None)
    print(f"Links with description: {[f.first('a') for f in linked]}")
    print()


def mapping(record):
    """
    Demonstrate converting a record into a dictionary.
    """
    print("=== Mapping ===\n")

    values, errors = record.map({
        "title": ("!", "021A", "a"),       # exactly one value
        "subject": ("*041A", "8"),         # any number of values
        "language": ("010@", "a"),         # first matching value, if any
        "identifier": lambda r: "ppn:" + r.first("003@$0"),
    })
    for key, value in values.items():
        print(f"  {key}: {value}")
    for key, error in errors.items():
        print(f"  {key}: ERROR {error}")
    print()


def main():
    """Main example runner."""
    logging.basicConfig(level=logging.INFO)

    print("\n" + "=" * 70)
    print("pica: Reading and Querying PICA+ Records")
    print("=" * 70 + "\n")

    record = load_record(sys.argv)

    field_access(record)
    locator_queries(record)
    filtered_queries(record)
    mapping(record)


if __name__ == '__main__':
    main()
