import os
from typing import Any, Callable, Optional, Sequence

from json_file_crud.core.errors import FilePathRequired, NotFound
from json_file_crud.core.identifiers import (
    ensure_identifier_available,
    ensure_identifier_unchanged,
    ensure_unique_fields,
    find_index,
    generate_next_id,
)
from json_file_crud.core.queue import OperationQueue, Storage
from json_file_crud.core.settings import get_settings
from json_file_crud.core.storage import JsonStore
from json_file_crud.core.validators import as_record, validate_record, validate_records
from json_file_crud.models import (
    Err,
    MutationResult,
    Mutator,
    Ok,
    OperationType,
    Record,
    StoreOptions,
    Transaction,
)


class JsonFileCrud:
    """CRUD over a JSON array file with serialized writes.

    Mutations (create, update, delete, write_all, delete_all) go through a
    per-instance FIFO queue and each re-reads the file before changing it.
    Reads go straight to the file and may see a state that does not yet
    include mutations still waiting in the queue.

    storage replaces the JSON file backend with any object exposing async
    read_all() and write_all(records).
    """

    def __init__(
        self,
        file_path: str,
        options: Optional[StoreOptions] = None,
        *,
        storage: Optional[Storage] = None,
        **overrides: Any,
    ):
        if not file_path:
            raise FilePathRequired()
        settings = get_settings()
        if options is None:
            options = StoreOptions.from_settings(settings)
        if overrides:
            options = StoreOptions(**{**options.model_dump(), **overrides})
        self._options = options
        self._file_path = os.path.abspath(file_path)
        if storage is None:
            storage = JsonStore(self._file_path, indent=settings.json_indent)
        self._store = storage
        self._queue = OperationQueue(self._store)

    @property
    def file_path(self) -> str:
        return self._file_path

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def id_field(self) -> str:
        return self._options.id_field

    @property
    def auto_id(self) -> bool:
        return self._options.auto_id

    @property
    def unique_fields(self) -> tuple[str, ...]:
        return self._options.unique_fields

    @property
    def queue(self) -> OperationQueue:
        return self._queue

    # PUBLIC_INTERFACE
    async def create(self, record: Any) -> Record:
        """Append a record, assigning the next numeric identifier if needed."""
        error = validate_record(record)
        if error is not None:
            raise error
        item = as_record(record)
        id_field = self.id_field

        def mutate(records: list[Record]) -> MutationResult:
            new_item = dict(item)
            if new_item.get(id_field) is None:
                if self.auto_id:
                    new_item[id_field] = generate_next_id(records, id_field)
                else:
                    new_item.pop(id_field, None)
            if id_field in new_item:
                ensure_identifier_available(records, id_field, new_item[id_field])
            ensure_unique_fields(records, new_item, self.unique_fields)
            return Ok(records + [new_item], new_item)

        return await self._enqueue(OperationType.CREATE, {"item": item}, mutate)

    # PUBLIC_INTERFACE
    async def read_all(self) -> list[Record]:
        """Return every record in file order (empty if the file does not exist)."""
        return await self._store.read_all()

    # PUBLIC_INTERFACE
    async def find_by_id(self, id: Any) -> Record:
        items = await self.read_all()
        idx = find_index(items, self.id_field, id)
        if idx == -1:
            raise NotFound(self.id_field, id)
        return items[idx]

    # PUBLIC_INTERFACE
    async def find_by(self, predicate: Callable[[Record], bool]) -> list[Record]:
        items = await self.read_all()
        return [item for item in items if predicate(item)]

    # PUBLIC_INTERFACE
    async def count(self) -> int:
        return len(await self.read_all())

    # PUBLIC_INTERFACE
    async def update(self, id: Any, patch: Any) -> Record:
        """Shallow-merge patch into the record with the given identifier."""
        error = validate_record(patch)
        if error is not None:
            raise error
        changes = as_record(patch, partial=True)
        id_field = self.id_field
        ensure_identifier_unchanged(changes, id_field, id)

        def mutate(records: list[Record]) -> MutationResult:
            idx = find_index(records, id_field, id)
            if idx == -1:
                return Err(NotFound(id_field, id))
            ensure_unique_fields(records, changes, self.unique_fields, skip_index=idx)
            merged = {**records[idx], **changes}
            items = list(records)
            items[idx] = merged
            return Ok(items, merged)

        return await self._enqueue(OperationType.UPDATE, {"id": id, "data": changes}, mutate)

    # PUBLIC_INTERFACE
    async def delete(self, id: Any) -> Record:
        """Remove the record with the given identifier and return it."""
        id_field = self.id_field

        def mutate(records: list[Record]) -> MutationResult:
            idx = find_index(records, id_field, id)
            if idx == -1:
                return Err(NotFound(id_field, id))
            items = list(records)
            removed = items.pop(idx)
            return Ok(items, removed)

        return await self._enqueue(OperationType.DELETE, {"id": id}, mutate)

    # PUBLIC_INTERFACE
    async def write_all(self, records: Sequence[Any]) -> None:
        """Replace the whole file content with records."""
        error = validate_records(records)
        if error is not None:
            raise error
        items = [as_record(r) for r in records]
        await self._enqueue(
            OperationType.WRITE_ALL,
            {"count": len(items)},
            lambda _current: Ok(items, None),
            needs_read=False,
        )

    # PUBLIC_INTERFACE
    async def delete_all(self) -> None:
        await self.write_all([])

    # PUBLIC_INTERFACE
    async def process_write_queue(self) -> None:
        """Wait until all queued writes for this file have finished."""
        await self._queue.join()

    async def _enqueue(
        self,
        operation: OperationType,
        params: dict[str, Any],
        mutate: Mutator,
        needs_read: bool = True,
    ) -> Any:
        transaction = Transaction(operation=operation, params=params, mutate=mutate, needs_read=needs_read)
        return await self._queue.enqueue(transaction)


# PUBLIC_INTERFACE
def create_crud(file_path: str, **options: Any) -> JsonFileCrud:
    """Convenience constructor: create_crud("data/users.json", unique_fields=["email"])."""
    return JsonFileCrud(file_path, **options)
