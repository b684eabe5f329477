"""Shared test fixtures for rustydocs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from rustydocs.llm.base import LLMProvider, LLMResponse, Message
from rustydocs.store.base import VectorStore

LIB_RS = """//! Geometry helpers.

pub mod geometry;

use std::fmt;

/// A point in the plane.
#[derive(Debug, Clone, Copy)]
pub struct Point {
    /// Horizontal coordinate.
    pub x: f64,
    pub y: f64,
}

pub fn dist(p: Point) -> f64 {
    (p.x * p.x + p.y * p.y).sqrt()
}

impl fmt::Display for Point {
    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {
        write!(f, "({}, {})", self.x, self.y)
    }
}

#[cfg(test)]
mod tests {
    use super::*;

    #[test]
    fn origin_is_at_zero() {
        assert_eq!(dist(Point { x: 0.0, y: 0.0 }), 0.0);
    }
}
"""

GEOMETRY_RS = """//! Shapes built from points.

use crate::Point;

pub const ORIGIN: Point = Point { x: 0.0, y: 0.0 };

pub trait Area {
    fn area(&self) -> f64;
}

pub struct Circle {
    pub center: Point,
    pub radius: f64,
}

impl Area for Circle {
    fn area(&self) -> f64 {
        std::f64::consts::PI * self.radius * self.radius
    }
}

pub fn unit_circle() -> Circle {
    Circle { center: ORIGIN, radius: 1.0 }
}
"""


@pytest.fixture
def lib_source() -> str:
    return LIB_RS


@pytest.fixture
def tmp_crate(tmp_path: Path) -> Path:
    """Create a temporary Rust crate with two source files."""
    crate = tmp_path / "shapes"
    src = crate / "src"
    src.mkdir(parents=True)
    (crate / "Cargo.toml").write_text('[package]\nname = "shapes"\nversion = "0.1.0"\n')
    (src / "lib.rs").write_text(LIB_RS)
    (src / "geometry.rs").write_text(GEOMETRY_RS)

    # Build output is never parsed
    target = crate / "target" / "debug"
    target.mkdir(parents=True)
    (target / "generated.rs").write_text("fn generated() {}\n")

    return crate


class FakeCounter:
    """Counts whitespace separated words."""

    def __init__(self, context_size: int = 128_000) -> None:
        self.context_size = context_size

    def count(self, text: str) -> int:
        return len(text.split())


class FakeLLM(LLMProvider):
    """Language model double answering from a queue of canned responses."""

    def __init__(
        self,
        responses: list[str] | None = None,
        context_size: int = 128_000,
        fail_on: set[str] | None = None,
        vector_size: int = 4,
    ) -> None:
        super().__init__("fake-chat", "fake-embedding", seed=42, top_p=0.05)
        self.counter = FakeCounter(context_size)
        self.embedding_counter = FakeCounter(8191)
        self.responses = list(responses or [])
        self.fail_on = fail_on or set()
        self.vector_size = vector_size
        self.complete_calls: list[list[Message]] = []
        self.embed_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def complete(
        self,
        messages: list[Message],
        seed: int | None = None,
        top_p: float | None = None,
        json_mode: bool = True,
    ) -> LLMResponse:
        self.complete_calls.append(messages)
        return LLMResponse(content=self.responses.pop(0) if self.responses else "{}")

    async def embed(self, text: str) -> list[float]:
        from rustydocs.exceptions import LLMError

        self.embed_calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if any(marker in text for marker in self.fail_on):
                raise LLMError(f"Problems with response from OpenAI {self.embedding_model}: boom")
            return [float(len(text) % 7)] * self.vector_size
        finally:
            self.in_flight -= 1


class InMemoryStore(VectorStore):
    """Vector store double keeping points in a dict."""

    def __init__(self) -> None:
        self.points: dict[int, tuple[list[float], dict[str, Any]]] = {}
        self.collection_created = False
        self.search_results: list[dict[str, Any]] = []
        self.retrieve_calls: list[list[int]] = []

    async def ensure_collection(self) -> None:
        self.collection_created = True

    async def upsert(self, key: int, vector: list[float], payload: dict[str, Any]) -> None:
        self.points[key] = (vector, payload)

    async def search(self, vector: list[float], limit: int) -> list[dict[str, Any]]:
        return self.search_results[:limit]

    async def retrieve(self, keys: list[int]) -> list[dict[str, Any]]:
        self.retrieve_calls.append(keys)
        return [self.points[key][1] for key in keys if key in self.points]


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
