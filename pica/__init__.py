"""
pica: parse and query PICA+ bibliographic records.

PICA+ is the line based record format used by PICA library catalogs. Each
line is one field with a tag, an optional occurrence and coded subfields::

    003@ $0123456789
    021A $aHello$$World$hby somebody
    028A $dJane$aDoe

Values are addressed with locators such as ``"021A$a"``, ``"028A/01"`` or
``"!021A$a"``, and whole records can be mapped to dictionaries in one go.

Example:

    >>> from pica import Record
    >>> record = Record.parse(text)
    >>> record.first("021A", "a")
    'Hello$World'
    >>> values, errors = record.map({"title": "!021A$a", "ppn": "003@$0"})
"""

import logging

from .errors import (
    CallbackError,
    DuplicateSubfieldError,
    InvalidSubfieldCodeError,
    LocatorError,
    MalformedLocatorError,
    MixedLocatorError,
    NotFoundError,
    PicaError,
    QueryError,
    RepeatedError,
)
from .field import Field, Subfield
from .filters import CustomFilter, FilterChain, FormatFilter, PatternFilter
from .locator import Locator, clear_locator_cache, parse_locator
from .mapper import map_field, map_record
from .record import Record

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Field",
    "Subfield",
    "Record",
    "Locator",
    "parse_locator",
    "clear_locator_cache",
    "FilterChain",
    "PatternFilter",
    "FormatFilter",
    "CustomFilter",
    "map_record",
    "map_field",
    "PicaError",
    "LocatorError",
    "MalformedLocatorError",
    "MixedLocatorError",
    "DuplicateSubfieldError",
    "InvalidSubfieldCodeError",
    "QueryError",
    "NotFoundError",
    "RepeatedError",
    "CallbackError",
]
