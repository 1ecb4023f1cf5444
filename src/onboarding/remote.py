"""
Remote row store.

The engine needs two operations against one table: a filtered select and an
upsert keyed by a unique column. SupabaseRemoteStore implements them over
supabase-py; its client is synchronous, so calls run in a worker thread.
"""

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """
    A remote call failed.

    `code` carries the backend's structured error code when there is one
    (PostgreSQL SQLSTATE or PostgREST PGRSTxxx), else None.
    """

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code
        super().__init__(f"[{code}] {message}" if code else message)


@runtime_checkable
class RemoteStore(Protocol):
    async def query(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict]:
        ...

    async def upsert(self, table: str, row: dict, on_conflict: str) -> None:
        ...


class SupabaseRemoteStore:
    """RemoteStore over a supabase-py Client."""

    def __init__(self, client: Any):
        self._client = client

    async def query(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict]:
        def _run() -> list[dict]:
            builder = self._client.table(table).select(columns)
            for column, value in filters.items():
                builder = builder.eq(column, value)
            if limit is not None:
                builder = builder.limit(limit)
            return builder.execute().data or []

        try:
            return await asyncio.to_thread(_run)
        except APIError as e:
            raise RemoteStoreError(e.message or str(e), e.code) from e
        except Exception as e:
            raise RemoteStoreError(str(e)) from e

    async def upsert(self, table: str, row: dict, on_conflict: str) -> None:
        def _run() -> None:
            self._client.table(table).upsert(row, on_conflict=on_conflict).execute()

        try:
            await asyncio.to_thread(_run)
        except APIError as e:
            raise RemoteStoreError(e.message or str(e), e.code) from e
        except Exception as e:
            raise RemoteStoreError(str(e)) from e
