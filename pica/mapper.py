"""
Batch queries: map a record (or field) to a dictionary of named values.

Example:

    >>> values, errors = record.map({
    ...     "title": ("!", "021A", "a"),     # exactly one value
    ...     "subject": ("*041A", "8"),       # any number of values
    ...     "language": "010@$a",            # first value, if any
    ...     "ppn": lambda rec: rec.first("003@$0"),
    ... })

Keys with empty results are left out of ``values``. Keys whose query
reported an error (including failing callbacks) are listed in ``errors``.
Both dictionaries are independent: an unresolved ``!`` query shows up in
``errors`` only.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Tuple

from .errors import CallbackError, QueryError
from .field import Field, subfield_selector
from .locator import CARDINALITY_FLAGS
from .query import query_field

logger = logging.getLogger(__name__)

__all__ = ["map_record", "map_field"]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, Field):
        return False
    try:
        return len(value) == 0
    except TypeError:
        return False


def _split_query(entry) -> Tuple[str, list]:
    """Split a tuple query into locator and remaining arguments.

    A leading cardinality flag of its own is prefixed to the locator, so
    ``("!", "021A", "a")`` is the same as ``("!021A", "a")``.
    """
    items = list(entry)
    if not items or not isinstance(items[0], str):
        raise TypeError(f"mapping query must start with a string: {entry!r}")
    if items[0] in tuple(CARDINALITY_FLAGS) and len(items) > 1 and isinstance(items[1], str):
        return items[0] + items[1], items[2:]
    return items[0], items[1:]


def _record_query(record, entry) -> Tuple[Any, Optional[QueryError]]:
    if isinstance(entry, str):
        return record.get(entry)
    locator, rest = _split_query(entry)
    subfield = None
    if rest and (rest[0] is None or isinstance(rest[0], str)):
        subfield = rest.pop(0)
    filters = rest[0] if len(rest) == 1 else (rest or None)
    return record.get(locator, subfield, filters)


def _field_query(field: Field, entry) -> Tuple[Any, Optional[QueryError]]:
    if isinstance(entry, str):
        code, rest = entry, []
    else:
        items = list(entry)
        if not items or not isinstance(items[0], str):
            raise TypeError(f"mapping query must start with a subfield code: {entry!r}")
        code, rest = items[0], items[1:]
    flag = None
    if rest and isinstance(rest[0], str):
        flag = rest.pop(0)
    filters = rest[0] if len(rest) == 1 else (rest or None)

    selector = subfield_selector(code, flag).with_default("?")
    values, error = query_field(field, selector, filters)
    if len(values) == 1 and selector.cardinality not in ("*", "+"):
        return values[0], error
    return values, error


def _collect(target, mapping, resolve: Callable) -> Tuple[Dict[Any, Any], Dict[Any, QueryError]]:
    if not isinstance(mapping, Mapping):
        raise TypeError(f"mapping table required, got {type(mapping).__name__}")
    values: Dict[Any, Any] = {}
    errors: Dict[Any, QueryError] = {}
    for key, entry in mapping.items():
        if isinstance(entry, (str, tuple, list)):
            value, error = resolve(target, entry)
        elif callable(entry):
            try:
                value, error = entry(target), None
            except Exception as exc:
                logger.warning("mapping callback for %r failed: %s", key, exc)
                value, error = None, CallbackError(key, exc)
        else:
            raise TypeError(f"query for {key!r} must be string, tuple or callable, got {entry!r}")
        if error is not None:
            errors[key] = error
        if not _is_empty(value):
            values[key] = value
    return values, errors


def map_record(record, mapping) -> Tuple[Dict[Any, Any], Dict[Any, QueryError]]:
    """Run several named queries against a record.

    Args:
        record: The Record to query.
        mapping: Maps keys to a query string (``"!021A$a"``), a tuple
            ``([flag,] locator, [subfield], [filters])`` or a callable that
            receives the record.

    Returns:
        Tuple of (values, errors) dictionaries.

    Raises:
        TypeError: If mapping or one of its queries has an unsupported type.
        LocatorError: If a locator is malformed.
    """
    return _collect(record, mapping, _record_query)


def map_field(field: Field, mapping) -> Tuple[Dict[Any, Any], Dict[Any, QueryError]]:
    """Run several named subfield queries against a field.

    Queries are subfield locators (``"a"``, ``"a!"``, ``"9*"``), tuples
    ``(code, [flag], [filters])`` or callables receiving the field. Codes
    without flag return the first value. Single results are unwrapped unless
    the flag is ``*`` or ``+``.
    """
    return _collect(field, mapping, _field_query)
