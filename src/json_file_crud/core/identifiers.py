"""Identifier policy: auto-assignment, immutability and uniqueness checks.

All checks operate on a record snapshot handed in by the caller. The
collision checks run inside queued mutators, against the snapshot just read
from disk.
"""

import math
from typing import Any, Iterable, Mapping, Optional, Sequence

from json_file_crud.core.errors import CannotChangeIdentifier, DuplicateField, DuplicateIdentifier


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


# PUBLIC_INTERFACE
def generate_next_id(records: Sequence[Mapping[str, Any]], id_field: str) -> int | float:
    """Return one more than the highest numeric identifier, or 1.

    Non-numeric identifiers are ignored. Gaps left by deletions are never
    reused.
    """
    numeric = [r.get(id_field) for r in records if _is_numeric(r.get(id_field))]
    if not numeric:
        return 1
    return max(numeric) + 1


# PUBLIC_INTERFACE
def identifiers_equal(a: Any, b: Any) -> bool:
    """Exact identifier match: no coercion between bools, numbers and strings."""
    if a != b:
        return False
    # True == 1 in Python
    return isinstance(a, bool) == isinstance(b, bool)


def find_index(records: Sequence[Mapping[str, Any]], id_field: str, value: Any) -> int:
    for idx, record in enumerate(records):
        if id_field in record and identifiers_equal(record[id_field], value):
            return idx
    return -1


# PUBLIC_INTERFACE
def ensure_identifier_available(
    records: Sequence[Mapping[str, Any]], id_field: str, value: Any
) -> None:
    if find_index(records, id_field, value) != -1:
        raise DuplicateIdentifier(id_field, value)


# PUBLIC_INTERFACE
def ensure_identifier_unchanged(patch: Mapping[str, Any], id_field: str, current: Any) -> None:
    if id_field in patch and not identifiers_equal(patch[id_field], current):
        raise CannotChangeIdentifier(id_field)


# PUBLIC_INTERFACE
def ensure_unique_fields(
    records: Sequence[Mapping[str, Any]],
    values: Mapping[str, Any],
    unique_fields: Iterable[str],
    skip_index: Optional[int] = None,
) -> None:
    """Raise DuplicateField if any unique field in values is already taken.

    The record at skip_index (the one being updated) is not compared.
    """
    for name in unique_fields:
        value = values.get(name)
        if value is None:
            continue
        for idx, record in enumerate(records):
            if idx == skip_index:
                continue
            if name in record and identifiers_equal(record[name], value):
                raise DuplicateField(name, value)
