"""Unit tests for blob storage and document locks."""

import asyncio
from uuid import uuid4

import pytest

from signflow.application.locks import DocumentLocks
from signflow.domain.exceptions import DocumentBusy
from signflow.infrastructure.storage.public_bucket_storage import PublicBucketStorage


def test_public_bucket_urls() -> None:
    storage = PublicBucketStorage("https://files.example.com/docs/")
    url = storage.url_for("/tenants/7/lease 2026.pdf")
    assert url == "https://files.example.com/docs/tenants/7/lease%202026.pdf"
    assert storage.key_from_url(url) == "tenants/7/lease 2026.pdf"
    assert storage.key_from_url("https://elsewhere.example.com/x.pdf") is None


@pytest.mark.asyncio
async def test_locks_serialize_same_document() -> None:
    locks = DocumentLocks()
    document_id = uuid4()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold(document_id):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_locks_independent_documents() -> None:
    locks = DocumentLocks()
    first, second = uuid4(), uuid4()
    async with locks.hold(first):
        async with locks.hold(second):
            assert locks.locked(first) and locks.locked(second)
    assert not locks.locked(first)


@pytest.mark.asyncio
async def test_lock_timeout_raises_busy() -> None:
    locks = DocumentLocks(timeout=0.01)
    document_id = uuid4()
    async with locks.hold(document_id):
        with pytest.raises(DocumentBusy):
            async with locks.hold(document_id):
                pass
    assert len(locks) == 0
