import asyncio
from pathlib import Path
from typing import Any, Sequence

import pytest

from json_file_crud.crud import JsonFileCrud


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "JSON_CRUD_ID_FIELD",
        "JSON_CRUD_AUTO_ID",
        "JSON_CRUD_UNIQUE_FIELDS",
        "JSON_CRUD_INDENT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(scope="function")
def data_file(tmp_path) -> Path:
    return tmp_path / "data" / "items.json"


@pytest.fixture(scope="function")
def crud(data_file) -> JsonFileCrud:
    return JsonFileCrud(str(data_file))


class GatedStorage:
    """In-memory storage whose reads and writes can be held open by a test.

    fail_read and fail_write are one-shot: the next call raises, later calls succeed.
    write_gate holds writes only, so reads keep flowing while a cycle is in flight.
    """

    def __init__(self, records: Sequence[dict[str, Any]] = ()):
        self.records = [dict(r) for r in records]
        self.gate = asyncio.Event()
        self.gate.set()
        self.write_gate = asyncio.Event()
        self.write_gate.set()
        self.reads = 0
        self.writes: list[list[dict[str, Any]]] = []
        self.fail_read: Exception | None = None
        self.fail_write: Exception | None = None

    async def read_all(self) -> list[dict[str, Any]]:
        await self.gate.wait()
        self.reads += 1
        if self.fail_read is not None:
            error, self.fail_read = self.fail_read, None
            raise error
        return [dict(r) for r in self.records]

    async def write_all(self, records) -> None:
        await self.gate.wait()
        await self.write_gate.wait()
        if self.fail_write is not None:
            error, self.fail_write = self.fail_write, None
            raise error
        self.records = [dict(r) for r in records]
        self.writes.append(self.records)


@pytest.fixture(scope="function")
def storage() -> GatedStorage:
    return GatedStorage()


@pytest.fixture(scope="function")
def other_storage() -> GatedStorage:
    return GatedStorage()


@pytest.fixture(scope="function")
def gated_crud(data_file, storage) -> JsonFileCrud:
    return JsonFileCrud(str(data_file), storage=storage)
