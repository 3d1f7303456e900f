"""Abstract document store consumed by the careerboard core."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

Document = Dict[str, Any]
Predicate = Callable[[Document], bool]
SortSpec = Sequence[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


class StoreError(Exception):
    """Base class for storage failures."""


class DuplicateKeyError(StoreError):
    """A write violated a unique index."""

    def __init__(self, collection: str, fields: Tuple[str, ...], values: Tuple[Any, ...]):
        self.collection = collection
        self.fields = fields
        self.values = values
        super().__init__(f"duplicate key in {collection} on {fields}: {values}")


class DocumentNotFoundError(StoreError):
    """The addressed document does not exist."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection}/{doc_id} does not exist")


def get_path(document: Document, path: str) -> Any:
    """Resolve a dotted field path, returning None for missing segments."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class DocumentStore(ABC):
    """
    Document store with per-document atomicity.

    Every document carries a string ``id`` which is unique within its
    collection. Filters are predicates over documents; sort specs are
    ``(dotted_field, ASCENDING | DESCENDING)`` pairs applied left to right.
    """

    @abstractmethod
    def create_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        """Declare an index; unique indexes reject conflicting writes."""

    @abstractmethod
    async def insert(self, collection: str, document: Document) -> Document:
        """Insert a document, raising DuplicateKeyError on unique violations."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch a document by id."""

    @abstractmethod
    async def find_one(self, collection: str, where: Optional[Predicate] = None) -> Optional[Document]:
        """Fetch the first document matching the predicate."""

    @abstractmethod
    async def find(
        self,
        collection: str,
        where: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Find documents matching the predicate, sorted and paginated."""

    @abstractmethod
    async def count(self, collection: str, where: Optional[Predicate] = None) -> int:
        """Count documents matching the predicate."""

    @abstractmethod
    async def distinct(self, collection: str, field: str, where: Optional[Predicate] = None) -> List[Any]:
        """Distinct non-null values of a field among matching documents."""

    @abstractmethod
    async def replace(self, collection: str, document: Document) -> Document:
        """Replace the stored document with the same id."""

    @abstractmethod
    async def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        """Atomically add ``amount`` to a numeric field and return the new value."""
