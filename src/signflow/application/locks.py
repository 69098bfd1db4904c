"""Per-document mutual exclusion."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from uuid import UUID

from signflow.domain.exceptions import DocumentBusy


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class DocumentLocks:
    """One asyncio lock per document id, created on demand.

    Entries are dropped as soon as nobody holds or waits for them. Only one
    document's lock is ever taken per operation, so lock ordering cannot
    deadlock.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout
        self._entries: dict[UUID, _Entry] = {}

    def locked(self, document_id: UUID) -> bool:
        entry = self._entries.get(document_id)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, document_id: UUID) -> AsyncIterator[None]:
        """Exclusive access to ``document_id`` for the body of the block."""
        entry = self._entries.get(document_id)
        if entry is None:
            entry = self._entries[document_id] = _Entry()
        entry.users += 1
        try:
            try:
                async with asyncio.timeout(self._timeout):
                    await entry.lock.acquire()
            except TimeoutError:
                raise DocumentBusy(f"Document {document_id} is busy, try again") from None
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(document_id, None)
