"""
PICA+ records: an ordered list of fields with an index by tag.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import QueryError
from .field import Field
from .locator import parse_locator
from . import query

logger = logging.getLogger(__name__)

__all__ = ["Record"]

_LINE_SPLIT_RE = re.compile(r"[\r\n]+")


class Record:
    """A PICA+ record.

    Fields keep the order in which they were appended. A secondary index maps
    each tag to its fields (in the same order) and is used by all locator
    queries. Records only grow: fields are appended but never removed, and
    querying never modifies a record.

    Example:
        >>> record = Record.parse("003@ $0123\\n021A $aA title\\n028A $dJane$aDoe")
        >>> record.first("021A", "a")
        'A title'
        >>> record.get("!028A$a")
        ('Doe', None)
    """

    def __init__(self, fields=None):
        """Create a record.

        Args:
            fields: Optional iterable of Field objects or lines to append.
        """
        self._fields: List[Field] = []
        self._index: Dict[str, List[Field]] = {}
        if fields is not None:
            for field in fields:
                self.append(field)

    @classmethod
    def parse(cls, text: str) -> "Record":
        """Parse a record in PICA+ plain format, one field per line.

        Lines may be separated by CR and/or LF, blank lines are skipped.
        Malformed lines become invalid fields with an empty tag that no
        locator matches.
        """
        if not isinstance(text, str):
            raise TypeError(f"can only parse str, got {type(text).__name__}")
        record = cls()
        for line in _LINE_SPLIT_RE.split(text):
            if line.strip():
                record.append(Field.parse(line))
        invalid = len(record._index.get("", ()))
        if invalid:
            logger.debug("parsed record with %d fields, %d invalid", len(record), invalid)
        return record

    def append(self, field: Union[Field, str]) -> "Record":
        """Append a field, or a line of PICA+ that is parsed first."""
        if isinstance(field, str):
            field = Field.parse(field)
        elif not isinstance(field, Field):
            raise TypeError(f"can only append Field or str, got {type(field).__name__}")
        self._fields.append(field)
        self._index.setdefault(field.tag, []).append(field)
        return self

    def _lookup(self, tag: str) -> Sequence[Field]:
        return self._index.get(tag, ())

    # field access

    def fields(self) -> List[Field]:
        """All fields in record order."""
        return list(self._fields)

    def fields_by_tag(self, tag: str) -> List[Field]:
        """All fields with ``tag`` (any occurrence) in record order."""
        return list(self._index.get(tag, ()))

    @property
    def tags(self) -> List[str]:
        """Distinct valid tags in order of first appearance."""
        return [tag for tag in self._index if tag]

    # locator queries

    def first(self, locator, subfield: Optional[str] = None, filters: Any = None):
        """Return the first matching field or subfield value.

        Args:
            locator: Field locator, e.g. ``"028A"`` (any occurrence),
                ``"028A/"`` (no occurrence), ``"028A/xx"`` (some occurrence)
                or ``"028A/01"``, optionally with subfield (``"028A$a"``)
                and alternatives (``"028A|028C"``).
            subfield: Subfield code if the locator has none.
            filters: Value filters for subfield queries, field predicates
                for field queries.

        Returns:
            A Field or a value, or None if nothing matches.
        """
        plan = parse_locator(locator, subfield)
        return query.first(self._lookup, plan, filters)

    def all(self, locator=None, subfield: Optional[str] = None, filters: Any = None):
        """Return all matching fields as Record or all matching values as list.

        The returned record references the original field objects. Without
        locator (or with a callable as locator) all fields are filtered by
        the given predicates.

        Example:
            record.all("041A|044K", "9")  # all $9 of both tags
        """
        if locator is None or callable(locator):
            predicates = query.as_predicates(filters)
            if locator is not None:
                predicates = (locator,) + predicates
            return self.filter(*predicates)
        plan = parse_locator(locator, subfield)
        result = query.select_all(self._lookup, plan, filters)
        if plan.want_field:
            return Record(result)
        return result

    def get(
        self, query_string, subfield: Optional[str] = None, filters: Any = None
    ) -> Tuple[Any, Optional[QueryError]]:
        """Query with a cardinality prefix and error reporting.

        Args:
            query_string: Locator with optional prefix: ``!`` exactly one,
                ``?`` at most one, ``+`` at least one, ``*`` any number of
                matches. Without prefix this is :meth:`first`.
            subfield: Subfield code if the locator has none.
            filters: As for :meth:`first`.

        Returns:
            Tuple of (result, error). ``!``/``?`` give a single value (or
            Field), ``+``/``*`` give a list of values (or a Record).
            Errors are returned, never raised.
        """
        plan = parse_locator(query_string, subfield)
        result, error = query.evaluate(self._lookup, plan, filters)
        if plan.want_field and isinstance(result, list):
            result = Record(result)
        return result, error

    def has(self, locator, subfield: Optional[str] = None) -> bool:
        """Whether a locator matches anything."""
        return self.first(locator, subfield) is not None

    def map(self, mapping) -> Tuple[Dict[Any, Any], Dict[Any, QueryError]]:
        """Transform the record into a dictionary, see ``pica.mapper.map_record``."""
        from .mapper import map_record

        return map_record(self, mapping)

    # functional helpers

    def filter(self, *predicates: Callable[[Field], Any]) -> "Record":
        """Return a record with the fields accepted by all predicates."""
        return Record(
            field for field in self._fields
            if all(predicate(field) for predicate in predicates)
        )

    def apply(self, *funcs: Callable[[Field], Any]) -> None:
        """Call each function on each field, ignoring the return values."""
        for field in self._fields:
            for func in funcs:
                func(field)

    # dunder methods

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields))

    def __getitem__(self, key):
        """``record[0]`` is the first field, ``record['021A$a']`` the first match."""
        if isinstance(key, slice):
            return Record(self._fields[key])
        if isinstance(key, int):
            return self._fields[key]
        if isinstance(key, str):
            return self.first(key)
        raise TypeError(f"record indices must be int, slice or locator, not {type(key).__name__}")

    def __contains__(self, item) -> bool:
        if isinstance(item, Field):
            return any(field is item or field == item for field in self._fields)
        return self.has(item)

    def __str__(self) -> str:
        return "\n".join(str(field) for field in self._fields)

    def __repr__(self) -> str:
        return f"<Record with {len(self._fields)} fields>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._fields == other._fields
