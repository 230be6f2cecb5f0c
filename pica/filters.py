"""
Value filters applied to subfield values before cardinality checks.

A filter step receives the current value and answers with one of:

- a non-empty string, which replaces the value,
- ``True``, which keeps the value unchanged,
- anything else (``False``, ``None``, ``""``), which drops the value.

A ``FilterChain`` applies its steps in order and stops at the first drop.

Example:

    >>> chain = FilterChain().find(r"^DDC(\\d+)").format("ddc:{}")
    >>> chain.apply("DDC23")
    'ddc:23'
    >>> chain.apply("XYZ") is None
    True
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Pattern, Tuple, Union

__all__ = [
    "PatternFilter",
    "FormatFilter",
    "CustomFilter",
    "FilterChain",
]


@dataclass(frozen=True)
class PatternFilter:
    """Keep values matching a regular expression.

    If the pattern has a capture group, the value is replaced by the first
    group.
    """

    pattern: Pattern

    def __init__(self, pattern: Union[str, Pattern]):
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        object.__setattr__(self, "pattern", pattern)

    def __call__(self, value: str) -> Union[str, bool, None]:
        match = self.pattern.search(value)
        if match is None:
            return False
        if self.pattern.groups:
            return match.group(1)
        return True


@dataclass(frozen=True)
class FormatFilter:
    """Replace the value with ``template.format(value)``."""

    template: str

    def __call__(self, value: str) -> str:
        return self.template.format(value)


@dataclass(frozen=True)
class CustomFilter:
    """Wrap a caller supplied function."""

    func: Callable[[str], Any]

    def __call__(self, value: str) -> Any:
        return self.func(value)


FilterStep = Union[PatternFilter, FormatFilter, CustomFilter]

_STEP_TYPES = (PatternFilter, FormatFilter, CustomFilter)

# Order in which the keys of a dict definition are applied.
_DICT_KEYS = ("find", "format", "each")


@dataclass(frozen=True)
class FilterChain:
    """An immutable, ordered list of filter steps."""

    steps: Tuple[FilterStep, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    def __bool__(self) -> bool:
        return bool(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def then(self, step: FilterStep) -> "FilterChain":
        """Return a new chain with ``step`` appended."""
        if not isinstance(step, _STEP_TYPES):
            raise TypeError(f"not a filter step: {step!r}")
        return FilterChain(self.steps + (step,))

    def find(self, pattern: Union[str, Pattern]) -> "FilterChain":
        return self.then(PatternFilter(pattern))

    def format(self, template: str) -> "FilterChain":
        return self.then(FormatFilter(template))

    def each(self, func: Callable[[str], Any]) -> "FilterChain":
        return self.then(CustomFilter(func))

    def __add__(self, other: "FilterChain") -> "FilterChain":
        if not isinstance(other, FilterChain):
            return NotImplemented
        return FilterChain(self.steps + other.steps)

    def apply(self, value: str) -> Optional[str]:
        """Run ``value`` through all steps.

        Returns:
            The (possibly replaced) value, or None if a step dropped it.
        """
        for step in self.steps:
            result = step(value)
            if isinstance(result, str):
                if result == "":
                    return None
                value = result
            elif result is not True:
                return None
        return value

    def apply_all(self, values: Iterable[str]) -> list:
        """Filter a sequence of values, dropping rejected ones."""
        if not self.steps:
            return list(values)
        result = []
        for value in values:
            filtered = self.apply(value)
            if filtered is not None:
                result.append(filtered)
        return result

    @classmethod
    def build(cls, definition: Any) -> "FilterChain":
        """Build a chain from a loose filter definition.

        Args:
            definition: None, a FilterChain, a single filter step, a callable,
                a dict with any of the keys ``find``, ``format`` and ``each``
                (applied in that order), or a list/tuple of such definitions.

        Raises:
            ValueError: If a dict definition has unknown keys.
            TypeError: If the definition has an unsupported type.
        """
        if definition is None:
            return cls()
        if isinstance(definition, FilterChain):
            return definition
        if isinstance(definition, _STEP_TYPES):
            return cls((definition,))
        if isinstance(definition, dict):
            unknown = set(definition) - set(_DICT_KEYS)
            if unknown:
                raise ValueError(f"unknown filter option(s): {', '.join(sorted(unknown))}")
            chain = cls()
            if definition.get("find") is not None:
                chain = chain.find(definition["find"])
            if definition.get("format") is not None:
                if not isinstance(definition["format"], str):
                    raise TypeError("'format' must be a string")
                chain = chain.format(definition["format"])
            if definition.get("each") is not None:
                if not callable(definition["each"]):
                    raise TypeError("'each' must be callable")
                chain = chain.each(definition["each"])
            return chain
        if isinstance(definition, (list, tuple)):
            chain = cls()
            for item in definition:
                chain = chain + cls.build(item)
            return chain
        if callable(definition):
            return cls((CustomFilter(definition),))
        raise TypeError(f"unsupported filter definition: {definition!r}")
