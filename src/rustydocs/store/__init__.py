"""Vector storage of embedded code elements."""

from rustydocs.store.base import VectorStore, element_payload
from rustydocs.store.embedding import embed_repository, upsert_code_element_embeddings
from rustydocs.store.lance import LanceVectorStore

__all__ = [
    "LanceVectorStore",
    "VectorStore",
    "element_payload",
    "embed_repository",
    "upsert_code_element_embeddings",
]
