"""Errors raised by the Jalali calendar helpers."""

from __future__ import annotations


class InvalidDateError(ValueError):
    """A date is outside the supported range or could not be parsed.

    Subclasses ``ValueError`` so callers that already guard date parsing
    with ``except ValueError`` keep working.
    """
