"""
Locator parsing: turn locator strings into reusable query plans.

Grammar (one or more alternatives separated by ``|``)::

    [CARDINALITY] TAG [OCC] [$CODE[FLAG][_]] ( "|" TAG [OCC] [$CODE[FLAG][_]] )*

    CARDINALITY  ! ? + *      query level, evaluated over all matches
    TAG          [0-9][0-9][0-9][A-Z@]
    OCC          (empty)      any occurrence, including none
                 /            no occurrence
                 /xx or /XX   some occurrence
                 /dd          exactly this occurrence
    FLAG         ! ? + *      field level, evaluated per field
    _            yield one empty value instead of nothing

Examples:

    >>> parse_locator("028A/01|028C").tags
    ('028A', '028C')
    >>> parse_locator("021A", "a").want_field
    False
    >>> parse_locator("!021A$a").cardinality
    '!'

Plans are frozen dataclasses and parsing is memoized, so the same locator
string used on many records is parsed once.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

from .config import LOCATOR_CACHE_SIZE
from .errors import DuplicateSubfieldError, MalformedLocatorError, MixedLocatorError

__all__ = [
    "CARDINALITY_FLAGS",
    "OccurrenceMode",
    "OccurrenceMatcher",
    "SubfieldSelector",
    "Alternative",
    "Locator",
    "parse_locator",
    "parse_subfield_selector",
    "clear_locator_cache",
]

CARDINALITY_FLAGS = "!?+*"

TAG_RE = re.compile(r"^[0-9][0-9][0-9][A-Z@]$")

_ALTERNATIVE_RE = re.compile(r"^\s*([0-9][0-9][0-9][A-Z@])([^$\s]*)\s*(.*?)\s*$")
_SELECTOR_RE = re.compile(r"^([a-zA-Z0-9])([!+?*]?)(_?)$")
_EXACT_OCC_RE = re.compile(r"^/([0-9][0-9])$")


class OccurrenceMode(Enum):
    ANY = "*"
    NONE = "/"
    SOME = "/xx"
    EXACT = "/dd"


@dataclass(frozen=True)
class OccurrenceMatcher:
    """Decides whether a field occurrence satisfies a locator."""

    mode: OccurrenceMode = OccurrenceMode.ANY
    value: str = ""

    def matches(self, occurrence: str) -> bool:
        if self.mode is OccurrenceMode.ANY:
            return True
        if self.mode is OccurrenceMode.NONE:
            return occurrence == ""
        if self.mode is OccurrenceMode.SOME:
            return occurrence != ""
        return occurrence == self.value

    def __str__(self) -> str:
        if self.mode is OccurrenceMode.ANY:
            return ""
        if self.mode is OccurrenceMode.EXACT:
            return "/" + self.value
        return self.mode.value


@dataclass(frozen=True)
class SubfieldSelector:
    """Subfield code plus its field level cardinality flag.

    ``code`` is None to select all subfield values of a field.
    """

    code: Optional[str] = None
    cardinality: str = ""
    placeholder: bool = False

    def with_default(self, cardinality: str) -> "SubfieldSelector":
        """Return a selector using ``cardinality`` unless one is already set."""
        if self.cardinality or self.code is None:
            return self
        return SubfieldSelector(self.code, cardinality, self.placeholder)

    def __str__(self) -> str:
        if self.code is None:
            return ""
        return self.code + self.cardinality + ("_" if self.placeholder else "")


ALL_SUBFIELDS = SubfieldSelector()


@dataclass(frozen=True)
class Alternative:
    tag: str
    occurrence: OccurrenceMatcher
    subfield: Optional[SubfieldSelector] = None

    def __str__(self) -> str:
        text = self.tag + str(self.occurrence)
        if self.subfield is not None:
            text += "$" + str(self.subfield)
        return text


@dataclass(frozen=True)
class Locator:
    """A parsed locator: immutable and safe to share between threads."""

    alternatives: Tuple[Alternative, ...]
    want_field: bool
    cardinality: str = ""
    source: str = ""

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(alt.tag for alt in self.alternatives)

    def __str__(self) -> str:
        return self.source or (
            self.cardinality + "|".join(str(alt) for alt in self.alternatives)
        )


def _parse_selector(text: str) -> SubfieldSelector:
    if not isinstance(text, str):
        raise TypeError(f"subfield locator must be a string, got {type(text).__name__}")
    match = _SELECTOR_RE.match(text)
    if match is None:
        raise MalformedLocatorError(f"invalid subfield locator: {text!r}", text)
    code, cardinality, placeholder = match.groups()
    return SubfieldSelector(code, cardinality, placeholder == "_")


def _parse_occurrence(occ: str, alternative: str) -> OccurrenceMatcher:
    if occ == "":
        return OccurrenceMatcher(OccurrenceMode.ANY)
    if occ == "/":
        return OccurrenceMatcher(OccurrenceMode.NONE)
    if occ in ("/xx", "/XX"):
        return OccurrenceMatcher(OccurrenceMode.SOME)
    match = _EXACT_OCC_RE.match(occ)
    if match is None:
        raise MalformedLocatorError(
            f"occurrence must be /, /xx or /00 to /99 in locator {alternative!r}",
            alternative,
        )
    return OccurrenceMatcher(OccurrenceMode.EXACT, match.group(1))


def _parse_alternative(text: str) -> Alternative:
    match = _ALTERNATIVE_RE.match(text)
    if match is None:
        raise MalformedLocatorError(f"malformed field locator: {text!r}", text)
    tag, occ, rest = match.groups()
    occurrence = _parse_occurrence(occ, text)
    if rest == "":
        return Alternative(tag, occurrence)
    if not rest.startswith("$") or len(rest) == 1:
        raise MalformedLocatorError(
            f"subfield must not be empty in locator {text!r}", text
        )
    return Alternative(tag, occurrence, _parse_selector(rest[1:]))


def _parse_locator(text: str, subfield: Optional[str]) -> Locator:
    if not isinstance(text, str):
        raise TypeError(f"locator must be a string, got {type(text).__name__}")
    source = text
    cardinality = ""
    if text[:1] in tuple(CARDINALITY_FLAGS):
        cardinality, text = text[0], text[1:]
    if not text.strip():
        raise MalformedLocatorError(f"empty locator: {source!r}", source)

    alternatives = [_parse_alternative(part) for part in text.split("|")]
    inline = [alt.subfield is not None for alt in alternatives]

    if all(inline):
        if subfield is not None:
            raise DuplicateSubfieldError(
                f"subfield in locator {source!r} and as parameter {subfield!r}",
                source,
            )
        return Locator(tuple(alternatives), False, cardinality, source)

    if any(inline):
        raise MixedLocatorError(
            f"field and subfield locators are mixed in {source!r}", source
        )

    if subfield is None:
        return Locator(tuple(alternatives), True, cardinality, source)

    selector = _parse_selector(subfield)
    alternatives = [Alternative(alt.tag, alt.occurrence, selector) for alt in alternatives]
    return Locator(tuple(alternatives), False, cardinality, source)


if LOCATOR_CACHE_SIZE:
    _cached_locator = lru_cache(maxsize=LOCATOR_CACHE_SIZE)(_parse_locator)
    _cached_selector = lru_cache(maxsize=LOCATOR_CACHE_SIZE)(_parse_selector)
else:
    _cached_locator = _parse_locator
    _cached_selector = _parse_selector


def parse_locator(text, subfield: Optional[str] = None) -> Locator:
    """Parse a locator string into a query plan.

    Args:
        text: Locator such as ``"021A"``, ``"028A/01|028C$a"`` or
            ``"!021A$a"``. An already parsed ``Locator`` is returned as is.
        subfield: Optional subfield code (with optional flags) applied to all
            alternatives when the locator has no inline subfield.

    Returns:
        An immutable ``Locator``.

    Raises:
        MalformedLocatorError: On any grammar violation.
        MixedLocatorError: If only some alternatives name a subfield.
        DuplicateSubfieldError: If a subfield is given inline and as argument.
    """
    if isinstance(text, Locator):
        if subfield is not None:
            if not text.want_field:
                raise DuplicateSubfieldError(
                    f"subfield in locator {str(text)!r} and as parameter {subfield!r}",
                    str(text),
                )
            return _cached_locator(str(text), subfield)
        return text
    if subfield is not None and not isinstance(subfield, str):
        raise TypeError(f"subfield must be a string, got {type(subfield).__name__}")
    return _cached_locator(text, subfield)


def parse_subfield_selector(text: str) -> SubfieldSelector:
    """Parse ``CODE[FLAG][_]`` such as ``"a"``, ``"a!"`` or ``"0?_"``."""
    if isinstance(text, SubfieldSelector):
        return text
    if not isinstance(text, str):
        raise TypeError(f"subfield locator must be a string, got {type(text).__name__}")
    return _cached_selector(text)


def clear_locator_cache() -> None:
    """Drop all memoized locator plans."""
    for func in (_cached_locator, _cached_selector):
        if hasattr(func, "cache_clear"):
            func.cache_clear()
