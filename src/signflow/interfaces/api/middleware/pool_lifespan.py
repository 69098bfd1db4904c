"""Lifespan middleware - opens the pool on startup, drains and closes on shutdown."""

from collections.abc import Awaitable, Callable
from typing import Any

from psycopg_pool import AsyncConnectionPool


class PoolLifespanMiddleware:
    """Opens the connection pool on startup.

    On shutdown runs ``on_shutdown`` hooks (pending notifications, HTTP
    clients) before closing the pool.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        on_shutdown: list[Callable[[], Awaitable[None]]] | None = None,
    ) -> None:
        self._pool = pool
        self._on_shutdown = on_shutdown or []

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.open()

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        for hook in self._on_shutdown:
            await hook()
        await self._pool.close()
