"""
Exceptions raised by the query layer and the bundled repositories.

Not-found is never an exception: lookups for unknown keys return an empty
result or None.
"""

from typing import Any, Dict, Optional


class QueryKVError(Exception):
    """Base exception for all querykv errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PreconditionError(QueryKVError, ValueError):
    """
    Raised when a required argument is missing or malformed.

    Examples:
    - None passed as a key, key selector or attribute selector
    - None (or a non-callable) passed as a predicate
    - A bare string passed where a sequence of keys is expected

    Always raised before the repository is touched.
    """

    pass


class DuplicateKeyError(QueryKVError):
    """
    Raised when the same key is produced twice while collecting entries
    into a mapping. There is no merge policy.
    """

    pass


class AttributeValueError(QueryKVError, TypeError):
    """
    Raised when an attribute name or value is not one of the supported
    kinds (text, number, boolean, null, nested mapping).
    """

    pass


class MaterializationError(QueryKVError):
    """
    Raised by object makers when a result object cannot be built from an
    entry, e.g. an expected attribute is missing.
    """

    pass
