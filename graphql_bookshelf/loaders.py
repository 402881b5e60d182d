from typing import Dict, List, Optional

from .dataloader import SyncDataLoader
from .models import Author, Book
from .repository import Repositories


def make_load_authors(repositories: Repositories):
    def load_authors(keys: List[str]) -> List[Optional[Author]]:
        wanted = set(keys)
        author_map: Dict[str, Author] = {}
        for author in repositories.authors.find_all_by(lambda a: a.id in wanted):
            # first inserted wins for duplicate ids
            author_map.setdefault(author.id, author)
        return [author_map.get(author_id) for author_id in keys]

    return load_authors


def make_load_books_by_author(repositories: Repositories):
    def load_books_by_author(keys: List[str]) -> List[List[Book]]:
        wanted = set(keys)
        books_map: Dict[str, List[Book]] = {key: [] for key in keys}
        for book in repositories.books.find_all_by(lambda b: b.author_id in wanted):
            books_map[book.author_id].append(book)
        return [books_map[author_id] for author_id in keys]

    return load_books_by_author


class Loaders:
    """Data loaders for one request. Never share them between requests."""

    def __init__(self, repositories: Repositories):
        self.author_loader = SyncDataLoader(make_load_authors(repositories))
        self.books_by_author_loader = SyncDataLoader(
            make_load_books_by_author(repositories)
        )


def build_context(repositories: Repositories) -> dict:
    return {
        "repositories": repositories,
        "loaders": Loaders(repositories),
    }
