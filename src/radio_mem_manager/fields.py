"""Header-driven access to channel row cells."""

from typing import Optional

from .models import FIELD_KEYS


def header_index(headers: list[str], name: str) -> int:
    try:
        return headers.index(name)
    except ValueError:
        return -1


def get_field(headers: list[str], row: Optional[list[str]], name: str) -> str:
    """Trimmed cell value, or "" when the column or cell is missing"""
    idx = header_index(headers, name)
    if row is None or idx < 0 or idx >= len(row):
        return ""
    return row[idx].strip()


def set_field(headers: list[str], row: list[str], name: str, value: str) -> bool:
    """Write a cell, padding the row with "" as needed.

    Does nothing and returns False if the column is not in the header set;
    callers widen the headers first.
    """
    idx = header_index(headers, name)
    if idx < 0:
        return False
    if len(row) <= idx:
        row.extend([""] * (idx + 1 - len(row)))
    row[idx] = value
    return True


def row_to_fields(headers: list[str], row: Optional[list[str]]) -> dict[str, str]:
    """Project a row onto the short edit-form keys"""
    return {key: get_field(headers, row, column) for key, column in FIELD_KEYS.items()}
