"""Reference graph over extracted Rust code elements."""

from rustydocs.graph.builder import GraphBuilder
from rustydocs.graph.query import GraphQuery
from rustydocs.graph.resolver import resolve_references

__all__ = ["GraphBuilder", "GraphQuery", "resolve_references"]
