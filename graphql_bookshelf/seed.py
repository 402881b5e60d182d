"""Records every store starts with."""
from typing import List

from .models import Author, Book

BASE_BOOKS: List[Book] = [
    Book(id="book1", title="The Awakening", author_id="author1"),
    Book(id="book2", title="City of Glass", author_id="author2"),
    Book(id="book3", title="Twilight", author_id="author3"),
]

BOOKS: List[Book] = BASE_BOOKS + [
    Book(id="book4", title="The Story of an Hour", author_id="author1"),
    Book(id="book5", title="The New York Trilogy", author_id="author2"),
    Book(id="book6", title="New Moon", author_id="author3"),
]

AUTHORS: List[Author] = [
    Author(id="author1", name="Kate Chopin"),
    Author(id="author2", name="Paul Auster"),
    Author(id="author3", name="Stephanie Meyer"),
]
