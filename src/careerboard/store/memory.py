"""In-process document store for development and tests."""

import copy
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

from careerboard.store.base import (
    DESCENDING,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    DuplicateKeyError,
    Predicate,
    SortSpec,
    get_path,
)
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """
    Document store backed by dictionaries.

    A single lock serialises every operation, which gives the same
    per-document atomicity guarantees a real document database offers.
    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self):
        self.logger = logger.bind(component="memory_store")
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._unique_indexes: Dict[str, List[Tuple[str, ...]]] = {}
        self._lock = threading.RLock()

    def _collection(self, name: str) -> Dict[str, Document]:
        return self._collections.setdefault(name, {})

    def create_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        if not unique:
            # Non-unique indexes only matter for query planning.
            return
        key = tuple(fields)
        with self._lock:
            indexes = self._unique_indexes.setdefault(collection, [])
            if key not in indexes:
                indexes.append(key)
                self.logger.debug("Unique index created", collection=collection, fields=list(key))

    def _check_unique(self, collection: str, document: Document) -> None:
        docs = self._collection(collection)
        for fields in self._unique_indexes.get(collection, []):
            values = tuple(get_path(document, field) for field in fields)
            for other in docs.values():
                if other["id"] == document["id"]:
                    continue
                if tuple(get_path(other, field) for field in fields) == values:
                    raise DuplicateKeyError(collection, fields, values)

    async def insert(self, collection: str, document: Document) -> Document:
        if "id" not in document:
            raise ValueError("documents must carry an 'id'")
        with self._lock:
            docs = self._collection(collection)
            if document["id"] in docs:
                raise DuplicateKeyError(collection, ("id",), (document["id"],))
            self._check_unique(collection, document)
            docs[document["id"]] = copy.deepcopy(document)
            return copy.deepcopy(document)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            document = self._collection(collection).get(doc_id)
            return copy.deepcopy(document) if document is not None else None

    async def find_one(self, collection: str, where: Optional[Predicate] = None) -> Optional[Document]:
        with self._lock:
            for document in self._collection(collection).values():
                if where is None or where(document):
                    return copy.deepcopy(document)
        return None

    async def find(
        self,
        collection: str,
        where: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        with self._lock:
            matches = [doc for doc in self._collection(collection).values() if where is None or where(doc)]
            matches = copy.deepcopy(matches)

        for field, direction in reversed(list(sort or [])):
            matches.sort(key=lambda doc: _sort_key(get_path(doc, field)), reverse=direction == DESCENDING)

        end = None if limit is None else skip + limit
        return matches[skip:end]

    async def count(self, collection: str, where: Optional[Predicate] = None) -> int:
        with self._lock:
            return sum(1 for doc in self._collection(collection).values() if where is None or where(doc))

    async def distinct(self, collection: str, field: str, where: Optional[Predicate] = None) -> List[Any]:
        values: List[Any] = []
        with self._lock:
            for doc in self._collection(collection).values():
                if where is not None and not where(doc):
                    continue
                value = get_path(doc, field)
                if value is not None and value not in values:
                    values.append(value)
        return values

    async def replace(self, collection: str, document: Document) -> Document:
        with self._lock:
            docs = self._collection(collection)
            if document.get("id") not in docs:
                raise DocumentNotFoundError(collection, str(document.get("id")))
            self._check_unique(collection, document)
            docs[document["id"]] = copy.deepcopy(document)
            return copy.deepcopy(document)

    async def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        with self._lock:
            document = self._collection(collection).get(doc_id)
            if document is None:
                raise DocumentNotFoundError(collection, doc_id)
            value = (document.get(field) or 0) + amount
            document[field] = value
            return value


def _sort_key(value: Any) -> Tuple[int, Any]:
    # None sorts before every other value.
    if value is None:
        return (0, 0)
    if hasattr(value, "value") and isinstance(value.value, str):
        return (1, value.value)
    return (1, value)
