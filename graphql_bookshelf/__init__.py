from .dataloader import SyncDataLoader
from .exceptions import InvalidStateError
from .execution import execute_query
from .execution_context import DeferredExecutionContext
from .models import Author, Book
from .repository import InMemoryRepository, Repositories
from .schema import schema
from .sync_future import SyncFuture

__version__ = "0.1.0"


__all__ = [
    "Author",
    "Book",
    "DeferredExecutionContext",
    "InMemoryRepository",
    "InvalidStateError",
    "Repositories",
    "SyncDataLoader",
    "SyncFuture",
    "execute_query",
    "schema",
]
