import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from json_file_crud.core.settings import Settings

Record = dict[str, Any]


class StoreOptions(BaseModel):
    """Per-store configuration, fixed at construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id_field: str = Field("id", min_length=1, description="Field used as the unique record identifier")
    auto_id: bool = Field(True, description="Assign numeric identifiers to records created without one")
    unique_fields: tuple[str, ...] = Field((), description="Fields that must be unique across records")

    @field_validator("unique_fields", mode="before")
    @classmethod
    def _split_fields(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreOptions":
        return cls(
            id_field=settings.id_field,
            auto_id=settings.auto_id,
            unique_fields=tuple(settings.unique_fields),
        )


class OperationType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    WRITE_ALL = "writeAll"


@dataclass(frozen=True)
class Ok:
    """Successful mutation: the full new record set and the caller's result."""

    records: list[Record]
    value: Any = None


@dataclass(frozen=True)
class Err:
    """Aborted mutation. Nothing is written."""

    error: Exception


MutationResult = Union[Ok, Err]
Mutator = Callable[[list[Record]], MutationResult]


@dataclass
class Transaction:
    """One pending or in-flight mutating request."""

    operation: OperationType
    params: dict[str, Any]
    mutate: Mutator
    # Bulk replacement does not need the current file content.
    needs_read: bool = True
    future: Optional[asyncio.Future] = field(default=None, repr=False)
