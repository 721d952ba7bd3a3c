"""Write serialization for a single JSON file.

Every mutating request is a Transaction. The queue is either Idle or Busy.
Enqueueing while Idle starts a drain task right away. Enqueueing while Busy
only appends to the FIFO. The drain task runs one read-modify-write cycle at
a time and resolves each transaction's future before it takes the next one,
so commit order is arrival order and every transaction reads what its
predecessors wrote.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from json_file_crud.models import Err, Ok, Record, Transaction

logger = logging.getLogger(__name__)


class Storage(Protocol):
    async def read_all(self) -> list[Record]: ...

    async def write_all(self, records: Sequence[Record]) -> None: ...


@dataclass
class QueueState:
    busy: bool = False
    pending: deque[Transaction] = field(default_factory=deque)


class OperationQueue:
    """FIFO of read-modify-write transactions against one storage."""

    def __init__(self, storage: Storage):
        self._storage = storage
        self._state = QueueState()
        self._drainer: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def pending_count(self) -> int:
        return len(self._state.pending)

    # PUBLIC_INTERFACE
    def enqueue(self, transaction: Transaction) -> asyncio.Future:
        """Submit a transaction and return the future that carries its outcome."""
        loop = asyncio.get_running_loop()
        transaction.future = loop.create_future()
        if self._state.busy:
            self._state.pending.append(transaction)
            logger.debug(
                "Queued %s (%d pending)", transaction.operation.value, len(self._state.pending)
            )
        else:
            self._state.busy = True
            self._drainer = loop.create_task(self._drain(transaction))
        return transaction.future

    # PUBLIC_INTERFACE
    async def join(self) -> None:
        """Wait until every queued transaction has been committed or failed."""
        while self._drainer is not None and not self._drainer.done():
            await asyncio.wait({self._drainer})

    async def _drain(self, transaction: Transaction) -> None:
        current: Optional[Transaction] = transaction
        try:
            while current is not None:
                error, result = await self.run(current)
                current = self.finish(current, error, result)
        finally:
            if current is not None:
                self._abandon(current)

    def _abandon(self, current: Transaction) -> None:
        """Drain task was cancelled (e.g. loop shutdown): cancel every waiter, go Idle."""
        abandoned = [current, *self._state.pending]
        self._state.pending.clear()
        self._state.busy = False
        logger.warning("Drain cancelled, abandoning %d transactions", len(abandoned))
        for transaction in abandoned:
            if transaction.future is not None and not transaction.future.done():
                transaction.future.cancel()

    async def run(self, transaction: Transaction) -> tuple[Optional[Exception], Any]:
        """Execute one read-modify-write cycle. Never raises."""
        logger.debug("Running %s %s", transaction.operation.value, transaction.params)
        records: list[Record] = []
        if transaction.needs_read:
            try:
                records = await self._storage.read_all()
            except Exception as exc:
                return exc, None

        try:
            outcome = transaction.mutate(records)
        except Exception as exc:
            outcome = Err(exc)
        if isinstance(outcome, Err):
            logger.warning("Aborted %s: %s", transaction.operation.value, outcome.error)
            return outcome.error, None
        if not isinstance(outcome, Ok):
            return TypeError(f"Mutator returned {type(outcome).__name__}, expected Ok or Err"), None

        try:
            await self._storage.write_all(outcome.records)
        except Exception as exc:
            logger.warning("Write failed for %s: %s", transaction.operation.value, exc)
            return exc, None
        logger.debug("Committed %s", transaction.operation.value)
        return None, outcome.value

    def finish(
        self, transaction: Transaction, error: Optional[Exception], result: Any
    ) -> Optional[Transaction]:
        """Resolve the transaction and hand back the next one to run, if any."""
        self._state.busy = False
        future = transaction.future
        # A caller that stopped waiting does not stop the transaction.
        if future is not None and not future.done():
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)
        if not self._state.pending:
            return None
        self._state.busy = True
        return self._state.pending.popleft()
