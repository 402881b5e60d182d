from dataclasses import dataclass


@dataclass(frozen=True)
class Author:
    id: str
    name: str


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author_id: str
