import threading
from typing import Callable, Generic, Iterable, List, Optional, Protocol, TypeVar

from .models import Author, Book
from . import seed


class Record(Protocol):
    id: str


T = TypeVar("T", bound=Record)


class Repository(Protocol[T]):
    """Storage seam the resolvers depend on."""

    def list_all(self) -> List[T]:
        ...

    def find_by_id(self, id: str) -> Optional[T]:
        ...

    def find_all_by(self, predicate: Callable[[T], bool]) -> List[T]:
        ...

    def append(self, record: T) -> T:
        ...


class InMemoryRepository(Generic[T]):
    """An ordered list of records held for the lifetime of the process.

    Lookups are linear scans. Ids are not required to be unique; the earliest
    inserted record wins. The lock only protects the list itself, so readers
    never observe a half-finished append when requests run on several
    threads.
    """

    def __init__(self, records: Iterable[T] = ()):
        self._records: List[T] = list(records)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def list_all(self) -> List[T]:
        with self._lock:
            return list(self._records)

    def find_by_id(self, id: str) -> Optional[T]:
        with self._lock:
            return next((record for record in self._records if record.id == id), None)

    def find_all_by(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            return [record for record in self._records if predicate(record)]

    def append(self, record: T) -> T:
        with self._lock:
            self._records.append(record)
        return record


class Repositories:
    def __init__(self, books: Repository[Book], authors: Repository[Author]):
        self.books = books
        self.authors = authors

    @classmethod
    def seeded(cls) -> "Repositories":
        return cls(
            books=InMemoryRepository(seed.BOOKS),
            authors=InMemoryRepository(seed.AUTHORS),
        )
