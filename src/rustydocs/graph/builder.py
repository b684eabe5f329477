"""Build a networkx view of a resolved repository."""

from __future__ import annotations

from pathlib import Path

import networkx as nx

from rustydocs.config import IndexerConfig, ProjectConfig
from rustydocs.parser.core import load_code_files
from rustydocs.parser.models import CodeFile


class GraphBuilder:
    """Builds a directed graph of code elements.

    Nodes are keyed by the element's storage hash. Edges are either
    ``depends_on`` (from an element to each of its dependencies) or
    ``contains`` (from an element to each of its children).
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        self.code_files: list[CodeFile] = []

    def build_from_directory(
        self,
        root: str | Path,
        config: ProjectConfig | None = None,
    ) -> nx.DiGraph:
        """Parse a repository (or load its snapshot) and build the graph."""
        indexer_config = config.indexer if config else IndexerConfig()
        self.code_files = load_code_files(root, indexer_config)
        return self.to_networkx()

    def build_from_files(self, code_files: list[CodeFile]) -> nx.DiGraph:
        self.code_files = code_files
        return self.to_networkx()

    def to_networkx(self) -> nx.DiGraph:
        """Convert the current files into a fresh `nx.DiGraph`."""
        self.graph = nx.DiGraph()

        for code_file in self.code_files:
            for element in code_file.elements:
                element_id = element.code_element_id
                self.graph.add_node(
                    element_id.get_hash(),
                    ident=element_id.ident,
                    kind=element_id.kind.value,
                    location=element_id.location,
                    qualified_path=element_id.qualified_path,
                    file_path=code_file.path,
                    line_start=element.line_start[0] if element.line_start else 0,
                )

        for code_file in self.code_files:
            for element in code_file.elements:
                source = element.code_element_id.get_hash()
                for dependency in element.dependencies:
                    target = dependency.get_hash()
                    if self.graph.has_node(target):
                        self.graph.add_edge(source, target, kind="depends_on")
                for child in element.children:
                    target = child.get_hash()
                    if self.graph.has_node(target):
                        self.graph.add_edge(source, target, kind="contains")

        return self.graph

    def get_stats(self) -> dict:
        """Get graph statistics."""
        node_types: dict[str, int] = {}
        edge_types: dict[str, int] = {}

        for _, data in self.graph.nodes(data=True):
            kind = data.get("kind", "unknown")
            node_types[kind] = node_types.get(kind, 0) + 1

        for _, _, data in self.graph.edges(data=True):
            kind = data.get("kind", "unknown")
            edge_types[kind] = edge_types.get(kind, 0) + 1

        return {
            "files": len(self.code_files),
            "elements": sum(len(f.elements) for f in self.code_files),
            "total_nodes": self.graph.number_of_nodes(),
            "total_edges": self.graph.number_of_edges(),
            "node_types": node_types,
            "edge_types": edge_types,
            "functions": node_types.get("fn", 0),
            "types": sum(node_types.get(k, 0) for k in ("struct", "enum", "union", "type")),
            "traits": node_types.get("trait", 0),
        }
