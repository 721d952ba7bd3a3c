from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel

from json_file_crud.core.errors import InvalidRecordShape


# PUBLIC_INTERFACE
def validate_record(value: Any) -> Optional[InvalidRecordShape]:
    """Return an error unless value is a structured mapping (or pydantic model)."""
    if isinstance(value, (Mapping, BaseModel)):
        return None
    return InvalidRecordShape()


# PUBLIC_INTERFACE
def validate_records(values: Any) -> Optional[InvalidRecordShape]:
    """Validate a bulk replacement: a list or tuple of records."""
    if not isinstance(values, (list, tuple)):
        return InvalidRecordShape("Items must be an array of objects")
    for value in values:
        error = validate_record(value)
        if error is not None:
            return error
    return None


def as_record(value: Any, partial: bool = False) -> dict[str, Any]:
    """Copy a validated value into a plain dict.

    Patches built from pydantic models only carry the fields that were set.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=partial)
    return dict(value)
