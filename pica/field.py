"""
PICA+ fields: a tag, an optional occurrence and an ordered list of subfields.

A field in PICA+ plain format looks like::

    021A $aHello$$World$hby somebody
    028C/01 $dJohn$aDoe

``$$`` stands for a literal dollar sign inside a subfield value.
"""

import logging
import re
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from .errors import InvalidSubfieldCodeError, MalformedLocatorError, QueryError
from .locator import ALL_SUBFIELDS, SubfieldSelector, parse_subfield_selector
from . import query

logger = logging.getLogger(__name__)

__all__ = ["Subfield", "Field", "subfield_selector"]

TAG_RE = re.compile(r"^[0-9][0-9][0-9][A-Z@]$")
OCCURRENCE_RE = re.compile(r"^[0-9][0-9]$")
FULL_TAG_RE = re.compile(r"^([0-9][0-9][0-9][A-Z@])(?:/([0-9][0-9]))?$")
CODE_RE = re.compile(r"^[a-zA-Z0-9]$")

_PAYLOAD_RE = re.compile(r"^(?:\$[a-zA-Z0-9](?:[^$]|\$\$)*)*$")
_SUBFIELD_RE = re.compile(r"\$([a-zA-Z0-9])((?:[^$]|\$\$)*)")
_FLAG_RE = re.compile(r"^([!+?*]?)(_?)$")
_CODE_CLASS_RE = re.compile(r"^\^?[a-zA-Z0-9-]+$")


class Subfield(NamedTuple):
    """A subfield code and its value."""

    code: str
    value: str


def _split_full_tag(tag: str, occurrence: str) -> Tuple[str, str]:
    if not tag:
        return "", ""
    if occurrence:
        if TAG_RE.match(tag) and OCCURRENCE_RE.match(occurrence):
            return tag, occurrence
        return "", ""
    match = FULL_TAG_RE.match(tag)
    if match is None:
        return "", ""
    return match.group(1), match.group(2) or ""


def _parse_payload(payload: str) -> Optional[List[Tuple[str, str]]]:
    if not _PAYLOAD_RE.match(payload):
        return None
    return [
        (code, value.replace("$$", "$"))
        for code, value in _SUBFIELD_RE.findall(payload)
    ]


def subfield_selector(code: Optional[str], flag: Optional[str] = None) -> SubfieldSelector:
    """Combine a subfield locator such as ``"a"`` or ``"a!"`` with an extra flag."""
    if code is None:
        return ALL_SUBFIELDS
    selector = parse_subfield_selector(code)
    if not flag:
        return selector
    match = _FLAG_RE.match(flag)
    if match is None:
        raise MalformedLocatorError(f"invalid cardinality flag: {flag!r}", flag)
    cardinality, placeholder = match.groups()
    return SubfieldSelector(
        selector.code,
        selector.cardinality or cardinality,
        selector.placeholder or placeholder == "_",
    )


class Field:
    """A PICA+ field.

    Fields are built with ``Field.parse`` or with the constructor followed by
    ``append``/``extend``. After that they are meant to be read only: there
    are no setters for tag and occurrence and queries never modify a field.
    The same field object may be shared by several records.

    Example:
        >>> field = Field.parse("021A $aHello$$World")
        >>> field.tag, field.first("a")
        ('021A', 'Hello$World')
        >>> str(field)
        '021A $aHello$$World'
    """

    __slots__ = ("_tag", "_occurrence", "_subfields", "_positions")

    def __init__(self, tag: str = "", occurrence: str = ""):
        """Create a field without subfields.

        Args:
            tag: Field tag such as ``"021A"``, optionally with occurrence
                (``"009P/09"``).
            occurrence: Two digit occurrence (``"01"``), only together with a
                plain tag.

        Invalid tags or occurrences do not raise; the field gets an empty
        tag instead, see ``ok``.
        """
        if not isinstance(tag, str) or not isinstance(occurrence, str):
            raise TypeError("tag and occurrence must be strings")
        self._tag, self._occurrence = _split_full_tag(tag, occurrence)
        self._subfields: List[Subfield] = []
        self._positions: Dict[str, List[int]] = {}

    @classmethod
    def parse(cls, line: str) -> "Field":
        """Parse one line of PICA+ plain format.

        Malformed lines never raise. They produce a field with an empty tag
        and no subfields, so a single bad line cannot spoil a whole record.
        """
        if not isinstance(line, str):
            raise TypeError(f"can only parse str, got {type(line).__name__}")
        line = line.rstrip("\r\n")
        dollar = line.find("$")
        if dollar < 0:
            prefix, payload = line.strip(), ""
        else:
            prefix, payload = line[:dollar].strip(), line[dollar:]

        field = cls(prefix) if prefix else cls()
        if prefix and not field._tag:
            logger.debug("invalid tag in line %r", line)
            return cls()

        pairs = _parse_payload(payload)
        if pairs is None:
            logger.debug("invalid subfield data in line %r", line)
            return cls()
        for code, value in pairs:
            field.append(code, value)
        return field

    # building

    def append(self, code: str, value: str) -> "Field":
        """Append a subfield. Empty values are silently ignored.

        Raises:
            InvalidSubfieldCodeError: If code is not one of ``[a-zA-Z0-9]``.
        """
        if not isinstance(code, str) or not CODE_RE.match(code):
            raise InvalidSubfieldCodeError(code)
        if not isinstance(value, str):
            raise TypeError(f"subfield value must be a string, got {type(value).__name__}")
        if value == "":
            return self
        self._positions.setdefault(code, []).append(len(self._subfields))
        self._subfields.append(Subfield(code, value))
        return self

    def extend(self, data: Union[str, Iterable[Tuple[str, str]]]) -> "Field":
        """Append several subfields.

        Args:
            data: Subfields in PICA+ notation (``"$xfoo$ybar"``) or an
                iterable of (code, value) pairs.
        """
        if isinstance(data, str):
            pairs = _parse_payload(data)
            if pairs is None:
                raise ValueError(f"malformed subfield data: {data!r}")
        else:
            pairs = data
        for code, value in pairs:
            self.append(code, value)
        return self

    # properties

    @property
    def tag(self) -> str:
        """Field tag without occurrence, empty if invalid."""
        return self._tag

    @property
    def occurrence(self) -> str:
        """Two digit occurrence or empty string."""
        return self._occurrence

    occ = occurrence

    @property
    def full_tag(self) -> str:
        """Tag and occurrence combined, e.g. ``"028C/01"``."""
        if self._tag and self._occurrence:
            return f"{self._tag}/{self._occurrence}"
        return self._tag

    @property
    def ok(self) -> bool:
        """Whether the field has a valid tag and at least one subfield."""
        return bool(self._tag) and bool(self._subfields)

    @property
    def level(self) -> Optional[int]:
        """Record level encoded in the first tag digit (0, 1 or 2)."""
        return int(self._tag[0]) if self._tag else None

    @property
    def number(self) -> Optional[int]:
        """The occurrence as number."""
        return int(self._occurrence) if self._occurrence else None

    # plain access

    def by_position(self, position: int) -> Optional[str]:
        """Value of the subfield at 0-based ``position``, or None."""
        if 0 <= position < len(self._subfields):
            return self._subfields[position].value
        return None

    def by_code(self, code: str) -> Optional[str]:
        """Value of the first subfield with ``code``, or None."""
        positions = self._positions.get(code)
        if not positions:
            return None
        return self._subfields[positions[0]].value

    def values_for(self, code: str) -> List[str]:
        """All values of subfields with ``code`` in field order."""
        return [self._subfields[pos].value for pos in self._positions.get(code, ())]

    def values(self) -> List[str]:
        return [sf.value for sf in self._subfields]

    def codes(self) -> List[str]:
        """Subfield codes in field order, e.g. ``['x', 'y', 'x']``."""
        return [sf.code for sf in self._subfields]

    def subfields(self) -> List[Subfield]:
        return list(self._subfields)

    # queries

    def get(
        self, code: Optional[str] = None, flag: Optional[str] = None, filters: Any = None
    ) -> Tuple[List[str], Optional[QueryError]]:
        """Query subfield values with a cardinality check.

        Args:
            code: Subfield code, optionally followed by a flag and the
                placeholder marker (``"a"``, ``"a!"``, ``"a?_"``). None
                selects all values.
            flag: Flag used if ``code`` carries none (``"!"``, ``"+_"``...).
            filters: Filter definition, see ``FilterChain.build``.

        Returns:
            Tuple of (values, error), error being None on success.

        Example:
            >>> Field.parse("021A $afoo$abar").get("a", "!")
            ([], RepeatedError('subfield a is repeated in field 021A'))
        """
        selector = subfield_selector(code, flag)
        return query.query_field(self, selector, filters)

    def first(self, code: Optional[str] = None, filters: Any = None) -> Optional[str]:
        """Return the first (filtered) value of a subfield, or None."""
        selector = subfield_selector(code).with_default("?")
        values, _ = query.query_field(self, selector, filters)
        return values[0] if values else None

    def all(self, code: Optional[str] = None, filters: Any = None) -> List[str]:
        """Return all (filtered) values of a subfield, or all values."""
        values, _ = self.get(code, None, filters)
        return values

    def map(self, mapping) -> Tuple[Dict[Any, Any], Dict[Any, QueryError]]:
        """Query several subfields at once, see ``pica.mapper.map_field``."""
        from .mapper import map_field

        return map_field(self, mapping)

    def join(self, sep: str = " ", codes=None) -> str:
        """Concatenate subfield values.

        Args:
            sep: Separator.
            codes: None for all values, a mapping as accepted by ``map``, or
                a sequence of subfield locators. Values are joined in the
                order of the mapping.
        """
        if codes is None:
            return sep.join(self.values())
        if isinstance(codes, str):
            codes = list(codes)
        if not isinstance(codes, dict):
            codes = {index: code for index, code in enumerate(codes)}
        values, _ = self.map(codes)
        parts = []
        for key in codes:
            if key not in values:
                continue
            value = values[key]
            if isinstance(value, list):
                parts.extend(value)
            else:
                parts.append(value)
        return sep.join(parts)

    def copy(self, full_tag: Optional[str] = None, codes: Optional[str] = None) -> "Field":
        """Copy the field.

        Args:
            full_tag: None keeps tag and occurrence, ``""`` drops them and a
                tag (``"123@"``, ``"123@/01"``) retags the copy. Anything else
                is taken as ``codes``, so ``field.copy("a-d")`` keeps the tag.
            codes: Optional character class body such as ``"a-d"`` or
                ``"^9"``; only subfields with matching codes are copied.

        Raises:
            MalformedLocatorError: If ``codes`` is not a valid class.
        """
        if full_tag is None:
            full_tag = self.full_tag
        elif (
            codes is None and isinstance(full_tag, str)
            and full_tag and not FULL_TAG_RE.match(full_tag)
        ):
            full_tag, codes = self.full_tag, full_tag
        matcher = None
        if codes is not None:
            if not isinstance(codes, str) or not _CODE_CLASS_RE.match(codes):
                raise MalformedLocatorError(f"illformed subfield locator: {codes!r}", codes)
            try:
                matcher = re.compile(f"[{codes}]")
            except re.error as exc:
                raise MalformedLocatorError(
                    f"illformed subfield locator: {codes!r}", codes
                ) from exc
        copied = Field(full_tag)
        for code, value in self._subfields:
            if matcher is None or matcher.match(code):
                copied.append(code, value)
        return copied

    # dunder methods

    def __len__(self) -> int:
        return len(self._subfields)

    def __iter__(self) -> Iterator[Subfield]:
        return iter(list(self._subfields))

    def __getitem__(self, key: Union[int, str]) -> Optional[str]:
        """``field[0]`` is the first value, ``field['a']`` the first ``$a``.

        Integer positions raise IndexError like a list, unknown codes
        return None.
        """
        if isinstance(key, int):
            return self._subfields[key].value
        return self.by_code(key)

    def __contains__(self, code: str) -> bool:
        return code in self._positions

    def __str__(self) -> str:
        full_tag = self.full_tag
        payload = "".join(
            "$" + code + value.replace("$", "$$") for code, value in self._subfields
        )
        if full_tag and payload:
            return f"{full_tag} {payload}"
        return full_tag + payload

    def __repr__(self) -> str:
        return f"Field.parse({str(self)!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self._tag == other._tag
            and self._occurrence == other._occurrence
            and self._subfields == other._subfields
        )

    def __hash__(self) -> int:
        """Hash based on tag and occurrence, which do not change after creation."""
        return hash((self._tag, self._occurrence))
