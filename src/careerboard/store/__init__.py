"""Document storage for careerboard."""

from .base import (
    ASCENDING,
    DESCENDING,
    DocumentNotFoundError,
    DocumentStore,
    DuplicateKeyError,
    StoreError,
)
from .memory import InMemoryDocumentStore

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "DocumentNotFoundError",
    "DocumentStore",
    "DuplicateKeyError",
    "InMemoryDocumentStore",
    "StoreError",
]
