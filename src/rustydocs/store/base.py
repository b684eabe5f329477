"""Base vector store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from rustydocs.parser.models import CodeElement


def element_payload(element: CodeElement, code: str | None = None) -> dict[str, Any]:
    """Payload stored next to an element's vector.

    `code` overrides the element's own code (e.g. with doc markers removed).
    """
    data = element.model_dump(mode="json")
    return {
        "children": data["children"],
        "code": element.code if code is None else code,
        "code_element_id": data["code_element_id"],
        "dependencies": data["dependencies"],
        "implementors": data["implementors"],
        "imports": data["imports"],
    }


class VectorStore(ABC):
    """Abstract base for vector stores keyed by element hash."""

    @abstractmethod
    async def ensure_collection(self) -> None:
        """Create the collection if it does not exist yet."""
        ...

    @abstractmethod
    async def upsert(self, key: int, vector: list[float], payload: dict[str, Any]) -> None:
        """Insert or replace the point stored under `key`."""
        ...

    @abstractmethod
    async def search(self, vector: list[float], limit: int) -> list[dict[str, Any]]:
        """Payloads of the `limit` points most similar to `vector`, best first."""
        ...

    @abstractmethod
    async def retrieve(self, keys: list[int]) -> list[dict[str, Any]]:
        """Payloads of the points stored under `keys` (missing keys are skipped)."""
        ...
