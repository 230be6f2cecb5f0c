"""Exception hierarchy for PICA+ parsing and querying.

Two families of errors exist:

- Locator and argument errors (``LocatorError`` and its subclasses,
  ``InvalidSubfieldCodeError``) are raised immediately. They point at a bad
  query definition or a bad call, not at bad data.
- Data-shape errors (``QueryError`` and its subclasses) are *returned* next to
  a (possibly partial) result and never raised by the query API.
"""

from typing import Optional


class PicaError(Exception):
    """Base class for all errors of this package."""


class LocatorError(PicaError, ValueError):
    """A locator string could not be turned into a query plan."""

    def __init__(self, message: str, locator: Optional[str] = None):
        super().__init__(message)
        self.locator = locator


class MalformedLocatorError(LocatorError):
    """Locator does not follow the ``TAG[/OCC][$CODE]`` grammar."""


class MixedLocatorError(LocatorError):
    """Some alternatives of a locator select subfields and others do not."""


class DuplicateSubfieldError(LocatorError):
    """Subfield given both inside the locator and as a separate argument."""


class InvalidSubfieldCodeError(PicaError, ValueError):
    """Subfield code outside of ``[a-zA-Z0-9]``."""

    def __init__(self, code):
        super().__init__(f"invalid subfield code: {code!r}")
        self.code = code


class QueryError(PicaError):
    """A query ran but the data did not have the expected shape.

    Instances are returned, not raised, by ``Field.get``, ``Record.get`` and
    the mapping functions.
    """

    def __init__(self, message: str, locator: Optional[str] = None):
        super().__init__(message)
        self.locator = locator


class NotFoundError(QueryError):
    """Nothing matched although at least one value was required."""


class RepeatedError(QueryError):
    """More values matched than the cardinality flag allows."""

    def __init__(self, message: str, locator: Optional[str] = None, count: int = 0):
        super().__init__(message, locator)
        self.count = count


class CallbackError(QueryError):
    """A mapping callback raised; the original exception is ``__cause__``."""

    def __init__(self, key, cause: BaseException):
        super().__init__(f"callback for {key!r} failed: {cause}")
        self.key = key
        self.__cause__ = cause
