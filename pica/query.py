"""
Query execution: run locator plans against fields and records.

The functions here never raise for data-shape problems. They return the
(possibly partial) result together with a ``QueryError`` or None, and the
caller decides whether a missing or repeated value is fatal.

Records are accessed through a ``lookup`` callable mapping a tag to the
fields carrying it, in record order. ``Record`` passes its tag index.
"""

from typing import Any, Callable, List, Optional, Sequence, Tuple

from .errors import NotFoundError, QueryError, RepeatedError
from .filters import FilterChain
from .locator import Locator, SubfieldSelector

__all__ = [
    "query_field",
    "select_fields",
    "select_values",
    "first",
    "select_all",
    "evaluate",
]

Lookup = Callable[[str], Sequence[Any]]


def _describe(field) -> str:
    full_tag = getattr(field, "full_tag", "")
    return f" in field {full_tag}" if full_tag else ""


def query_field(
    field, selector: SubfieldSelector, filters: Any = None
) -> Tuple[List[str], Optional[QueryError]]:
    """Select subfield values of a single field.

    Filters are applied to every candidate first, so the cardinality flag is
    checked against the surviving values:

    - ``!`` exactly one value, NotFoundError if none, RepeatedError if more
    - ``+`` at least one value, NotFoundError if none
    - ``?`` the first value if any, never fails
    - ``*`` or no flag: all values, never fails

    With the placeholder marker ``_`` an empty result becomes ``[""]`` unless
    an error is reported. A selector without code returns every value.

    Returns:
        Tuple of (values, error). Values are empty whenever error is set.
    """
    chain = FilterChain.build(filters)

    if selector.code is None:
        return chain.apply_all(field.values()), None

    code = selector.code
    candidates = field.values_for(code)
    cardinality = selector.cardinality
    error = None

    if cardinality == "?":
        values = []
        for value in candidates:
            value = chain.apply(value)
            if value is not None:
                values.append(value)
                break
    else:
        values = chain.apply_all(candidates)
        if cardinality in ("!", "+") and not values:
            error = NotFoundError(f"subfield {code} not found{_describe(field)}", str(selector))
        elif cardinality == "!" and len(values) > 1:
            error = RepeatedError(
                f"subfield {code} is repeated{_describe(field)}",
                str(selector),
                count=len(values),
            )

    if error is not None:
        return [], error
    if not values and selector.placeholder:
        values = [""]
    return values, None


def as_predicates(filters: Any) -> Tuple[Callable[[Any], Any], ...]:
    if filters is None:
        return ()
    if callable(filters):
        return (filters,)
    predicates = tuple(filters)
    for predicate in predicates:
        if not callable(predicate):
            raise TypeError(f"field filter must be callable, got {predicate!r}")
    return predicates


def select_fields(
    lookup: Lookup, locator: Locator, filters: Any = None, first: bool = False
) -> list:
    """Return the fields matched by a field locator.

    Alternatives are tried in locator order and fields in record order. With
    ``first`` only the first match of the first alternative that has any
    match is returned. Otherwise matches of all alternatives are
    accumulated. ``filters`` are field predicates that every selected field
    must satisfy.
    """
    predicates = as_predicates(filters)
    result = []
    for alternative in locator.alternatives:
        for field in lookup(alternative.tag):
            if not alternative.occurrence.matches(field.occurrence):
                continue
            if predicates and not all(predicate(field) for predicate in predicates):
                continue
            if first:
                return [field]
            result.append(field)
    return result


def select_values(
    lookup: Lookup, locator: Locator, filters: Any = None, first: bool = False
) -> Tuple[List[str], List[QueryError]]:
    """Collect subfield values of all matched fields.

    Each matched field is queried with the subfield selector of its
    alternative. Errors of single fields are collected and returned next to
    the values. With ``first`` the selector defaults to ``?`` and only the
    first field matched by tag and occurrence is queried, the same field
    ``select_fields`` would pick. Its result ends the search even if it is
    empty.
    """
    chain = FilterChain.build(filters)
    values: List[str] = []
    errors: List[QueryError] = []
    for alternative in locator.alternatives:
        selector = alternative.subfield
        if first:
            selector = selector.with_default("?")
        for field in lookup(alternative.tag):
            if not alternative.occurrence.matches(field.occurrence):
                continue
            found, error = query_field(field, selector, chain)
            if error is not None:
                errors.append(error)
            if first:
                return found[:1], errors
            values.extend(found)
    return values, errors


def first(lookup: Lookup, locator: Locator, filters: Any = None):
    """Return the first matching field or value, or None."""
    if locator.want_field:
        fields = select_fields(lookup, locator, filters, first=True)
        return fields[0] if fields else None
    values, _ = select_values(lookup, locator, filters, first=True)
    return values[0] if values else None


def select_all(lookup: Lookup, locator: Locator, filters: Any = None) -> list:
    """Return all matching fields or values as a list."""
    if locator.want_field:
        return select_fields(lookup, locator, filters)
    values, _ = select_values(lookup, locator, filters)
    return values


def evaluate(lookup: Lookup, locator: Locator, filters: Any = None) -> Tuple[Any, Optional[QueryError]]:
    """Run a locator honouring its query level cardinality prefix.

    The prefix is checked against all matches of all fields together:

    - ``!`` a single result, error unless exactly one matched
    - ``?`` a single result or None, error if more than one matched
    - ``+`` a list, error if nothing matched
    - ``*`` a list, never fails
    - no prefix: same as :func:`first`

    If the prefix is satisfied, the first error reported by a single field
    (for instance by an inline ``$a!``) is returned instead.

    Returns:
        Tuple of (result, error). Single results are None when an error is
        reported for them.
    """
    cardinality = locator.cardinality
    source = str(locator)

    if locator.want_field:
        matches, errors = select_fields(lookup, locator, filters, first=not cardinality), []
        noun = "fields"
    else:
        matches, errors = select_values(lookup, locator, filters, first=not cardinality)
        noun = "values"

    if not cardinality:
        if matches:
            return matches[0], None
        return None, (errors[0] if errors else None)

    count = len(matches)
    error: Optional[QueryError] = None

    if cardinality == "!":
        if count == 0:
            error = NotFoundError(f"{source}: not found", source)
        elif count > 1:
            error = RepeatedError(f"{source}: got {count} {noun} instead of one", source, count)
        result = matches[0] if count == 1 else None
    elif cardinality == "?":
        if count > 1:
            error = RepeatedError(
                f"{source}: got {count} {noun} instead of at most one", source, count
            )
        result = matches[0] if count == 1 else None
    elif cardinality == "+":
        if count == 0:
            error = NotFoundError(f"{source}: not found", source)
        result = matches
    else:
        result = matches

    if error is None and errors:
        error = errors[0]
    return result, error
