from typing import Any


class StoreError(Exception):
    """Base class for errors raised by the record store."""


class FilePathRequired(StoreError, ValueError):
    def __init__(self) -> None:
        super().__init__("File path is required")


class InvalidRecordShape(StoreError, TypeError):
    def __init__(self, message: str = "Item must be an object") -> None:
        super().__init__(message)


class InvalidContent(StoreError, ValueError):
    def __init__(self, message: str = "File content is not a JSON array") -> None:
        super().__init__(message)


class DuplicateIdentifier(StoreError):
    def __init__(self, id_field: str, value: Any) -> None:
        self.id_field = id_field
        self.value = value
        super().__init__(f"Item with {id_field} {value} already exists")


class DuplicateField(StoreError):
    """A unique field value collides with another record's value."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Item with {field} {value} already exists")


class CannotChangeIdentifier(StoreError):
    def __init__(self, id_field: str) -> None:
        self.id_field = id_field
        super().__init__(f"Cannot change {id_field} field")


class NotFound(StoreError, LookupError):
    def __init__(self, id_field: str, value: Any) -> None:
        self.id_field = id_field
        self.value = value
        super().__init__(f"Item with {id_field} {value} not found")
