from typing import List, Optional

from graphql import GraphQLResolveInfo

from .logging import get_logger
from .models import Author, Book
from .repository import Repositories
from .sync_future import SyncFuture

logger = get_logger(__name__)


def _repositories(info: GraphQLResolveInfo) -> Repositories:
    return info.context["repositories"]


def resolve_books(_, info: GraphQLResolveInfo) -> List[Book]:
    return _repositories(info).books.list_all()


def resolve_authors(_, info: GraphQLResolveInfo) -> List[Author]:
    return _repositories(info).authors.list_all()


def resolve_book_by_id(
    _, info: GraphQLResolveInfo, id: Optional[str] = None
) -> Optional[Book]:
    return _repositories(info).books.find_by_id(id)


def resolve_author_by_id(
    _, info: GraphQLResolveInfo, id: Optional[str] = None
) -> Optional[Author]:
    return _repositories(info).authors.find_by_id(id)


def resolve_add_book(
    _,
    info: GraphQLResolveInfo,
    id: Optional[str] = None,
    title: Optional[str] = None,
    authorId: Optional[str] = None,
) -> Book:
    # no uniqueness check on id and no existence check on authorId
    book = _repositories(info).books.append(
        Book(id=id, title=title, author_id=authorId)
    )
    logger.info("Book added", book_id=book.id, author_id=book.author_id)
    return book


def resolve_book_author(book: Book, info: GraphQLResolveInfo) -> SyncFuture:
    return info.context["loaders"].author_loader.load(book.author_id)


def resolve_author_books(author: Author, info: GraphQLResolveInfo) -> SyncFuture:
    return info.context["loaders"].books_by_author_loader.load(author.id)
