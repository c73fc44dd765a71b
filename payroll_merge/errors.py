"""
errors.py

Exceptions and warning categories shared by the loaders, engines and writers.

Every error is terminal for the single action that raised it and leaves any
previously computed state untouched.
"""

from __future__ import annotations


class PayrollMergeError(ValueError):
    """Base class for reconciliation errors."""


class HeaderNotFoundError(PayrollMergeError):
    """The header row was not found within the search window (input unavailable)."""

    def __init__(self, label: str, required_columns, max_rows: int) -> None:
        self.label = label
        self.required_columns = list(required_columns)
        self.max_rows = max_rows
        cols = ", ".join(self.required_columns)
        super().__init__(
            f"{label}: no se encontraron los encabezados ({cols}) "
            f"en las primeras {max_rows} filas del archivo."
        )


class PreconditionError(PayrollMergeError):
    """A merge or split was requested without its required datasets."""


class EmptyResultError(PayrollMergeError):
    """A download was requested but there is nothing to write."""


class MissingColumnsWarning(UserWarning):
    """Expected columns are missing; processing continues with blanks."""
