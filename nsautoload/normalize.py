"""Prefix and directory normalization.

Both transforms accept either ``\\`` or ``/`` as a separator in their input and
rewrite it to a single canonical character, always leaving exactly one
trailing separator. Applying either transform twice gives the same result.
"""

import os

NAMESPACE_SEPARATOR = "."
RECOGNIZED_SEPARATORS = ("\\", "/")


def _normalize(value: str, separator: str) -> str:
    for recognized in RECOGNIZED_SEPARATORS:
        value = value.replace(recognized, separator)
    return value.rstrip(separator) + separator


def normalize_namespace(namespace: str) -> str:
    """Normalize a namespace prefix.

    Examples:
        >>> normalize_namespace("Acme\\\\Billing")
        'Acme.Billing.'
        >>> normalize_namespace("Acme.Billing.")
        'Acme.Billing.'
    """
    return _normalize(namespace, NAMESPACE_SEPARATOR)


def normalize_directory(directory: str | os.PathLike[str]) -> str:
    """Normalize a base directory to use ``os.sep`` with one trailing separator."""
    return _normalize(os.fspath(directory), os.sep)
