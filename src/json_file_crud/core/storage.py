import json
import logging
import os
from typing import Any, Sequence

import aiofiles
import aiofiles.os

from json_file_crud.core.errors import InvalidContent

logger = logging.getLogger(__name__)


class JsonStore:
    """JSON array file store: whole-file reads and whole-file writes.

    No locking happens here. Mutations are serialized by the operation queue,
    reads are not.
    """

    def __init__(self, file_path: str, indent: int = 2):
        self._file_path = file_path
        self._indent = indent

    @property
    def file_path(self) -> str:
        return self._file_path

    async def read_all(self) -> list[dict[str, Any]]:
        try:
            async with aiofiles.open(self._file_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return []
        if not content:
            return []
        items = json.loads(content)
        if not isinstance(items, list):
            raise InvalidContent()
        if not all(isinstance(item, dict) for item in items):
            raise InvalidContent("File content is not a JSON array of objects")
        return items

    async def write_all(self, records: Sequence[dict[str, Any]]) -> None:
        # Serialize first so an unencodable record never truncates the file.
        content = json.dumps(list(records), indent=self._indent, ensure_ascii=False)
        directory = os.path.dirname(self._file_path)
        if directory:
            await aiofiles.os.makedirs(directory, exist_ok=True)
        async with aiofiles.open(self._file_path, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.debug("Wrote %d records to %s", len(records), self._file_path)
