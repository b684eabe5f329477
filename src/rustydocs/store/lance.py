"""Vector store backed by LanceDB, an embedded local-first vector database.

Schema per row:

======== ============ =====================================
Column   Type         Description
======== ============ =====================================
key      utf8         Element hash (unsigned 64-bit, decimal)
vector   float32[dim] Embedding vector
payload  utf8         JSON payload of the element
======== ============ =====================================
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from rustydocs.exceptions import VectorStoreError
from rustydocs.store.base import VectorStore

logger = logging.getLogger(__name__)


class LanceVectorStore(VectorStore):
    """LanceDB table of element vectors using dot-product similarity."""

    def __init__(self, uri: str | Path, table_name: str = "code_elements", vector_size: int = 1536) -> None:
        self.uri = str(uri)
        self.table_name = table_name
        self.vector_size = vector_size
        self._db: Any = None
        self._table: Any = None
        self._write_lock = asyncio.Lock()

    def _schema(self):
        import pyarrow as pa

        return pa.schema(
            [
                pa.field("key", pa.string()),
                pa.field("vector", pa.list_(pa.float32(), self.vector_size)),
                pa.field("payload", pa.string()),
            ]
        )

    def _open(self) -> Any:
        if self._table is None:
            import lancedb

            if "://" not in self.uri:
                Path(self.uri).mkdir(parents=True, exist_ok=True)
            self._db = lancedb.connect(self.uri)
            self._table = self._db.create_table(
                self.table_name, schema=self._schema(), exist_ok=True
            )
        return self._table

    async def _run(self, action: str, fn, *args) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Problems with vector store table '{self.table_name}' during {action}: {e}"
            ) from e

    async def ensure_collection(self) -> None:
        await self._run("collection creation", self._open)
        logger.debug("Using LanceDB table %s at %s", self.table_name, self.uri)

    def _upsert(self, key: int, vector: list[float], payload: dict[str, Any]) -> None:
        if len(vector) != self.vector_size:
            raise VectorStoreError(
                f"Vector of size {len(vector)} does not fit table '{self.table_name}' "
                f"of size {self.vector_size}"
            )
        row = {"key": str(key), "vector": vector, "payload": json.dumps(payload)}
        (
            self._open()
            .merge_insert("key")
            .when_matched_update_all()
            .when_not_matched_insert_all()
            .execute([row])
        )

    async def upsert(self, key: int, vector: list[float], payload: dict[str, Any]) -> None:
        async with self._write_lock:
            await self._run("upsert", self._upsert, key, vector, payload)

    def _search(self, vector: list[float], limit: int) -> list[dict[str, Any]]:
        rows = self._open().search(vector).distance_type("dot").limit(limit).to_list()
        return [json.loads(row["payload"]) for row in rows]

    async def search(self, vector: list[float], limit: int) -> list[dict[str, Any]]:
        return await self._run("search", self._search, vector, limit)

    def _retrieve(self, keys: list[int]) -> list[dict[str, Any]]:
        if not keys:
            return []
        wanted = ", ".join(f"'{key}'" for key in keys)
        rows = self._open().search().where(f"key IN ({wanted})").limit(len(keys)).to_list()
        return [json.loads(row["payload"]) for row in rows]

    async def retrieve(self, keys: list[int]) -> list[dict[str, Any]]:
        return await self._run("retrieve", self._retrieve, keys)
