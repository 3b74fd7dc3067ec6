"""
Error kinds raised by book_core.

Both are surfaced to the caller immediately. Nothing in book_core retries,
falls back, or returns partial results for an offending record.
"""


class ValidationError(ValueError):
    """Malformed or semantically invalid input value (bad size, unknown side, ...)."""


class ParseError(ValidationError):
    """Numeric text that could not be parsed."""
