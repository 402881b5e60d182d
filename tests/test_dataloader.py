from unittest.mock import Mock
from functools import partial

import pytest
from graphql import (
    graphql_sync,
    GraphQLSchema,
    GraphQLObjectType,
    GraphQLField,
    GraphQLArgument,
    GraphQLString,
    GraphQLList,
)

from graphql_bookshelf import DeferredExecutionContext, SyncDataLoader

graphql_sync_deferred = partial(
    graphql_sync, execution_context_class=DeferredExecutionContext
)


AUTHOR_NAMES = {
    "author1": "Kate Chopin",
    "author2": "Paul Auster",
    "author3": "Stephanie Meyer",
}

BOOKS = {
    "book1": {"title": "The Awakening", "authorId": "author1", "sequel": None},
    "book2": {"title": "City of Glass", "authorId": "author2", "sequel": "book5"},
    "book3": {"title": "Twilight", "authorId": "author3", "sequel": "book6"},
    "book5": {"title": "The New York Trilogy", "authorId": "author2", "sequel": None},
    "book6": {"title": "New Moon", "authorId": "author3", "sequel": None},
}


def make_book_type(resolve_sequel):
    book = GraphQLObjectType(
        name="Book",
        fields=lambda: {
            "title": GraphQLField(GraphQLString),
            "sequel": GraphQLField(book, resolve=resolve_sequel),
        },
    )
    return book


def test_deferred_execution():
    def load_fn(keys):
        return [AUTHOR_NAMES[key] for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_name(_, __, id):
        return dataloader.load(id)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "authorName": GraphQLField(
                    GraphQLString,
                    args={
                        "id": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_name,
                )
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            name1: authorName(id: "author1")
            name2: authorName(id: "author2")
        }
        """,
    )

    assert not result.errors
    assert result.data == {"name1": "Kate Chopin", "name2": "Paul Auster"}
    assert mock_load_fn.call_count == 1


def test_nested_deferred_execution():
    def load_fn(keys):
        return [BOOKS[key] for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_book(_, __, id):
        return dataloader.load(id)

    def resolve_sequel(book, _):
        if book["sequel"]:
            return dataloader.load(book["sequel"])
        return None

    book = make_book_type(resolve_sequel)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "book": GraphQLField(
                    book,
                    args={
                        "id": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_book,
                )
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            book1: book(id: "book2") {
                title
                sequel {
                    title
                }
            }
            book2: book(id: "book3") {
                title
                sequel {
                    title
                }
            }
        }
        """,
    )

    assert not result.errors
    assert result.data == {
        "book1": {
            "title": "City of Glass",
            "sequel": {
                "title": "The New York Trilogy",
            },
        },
        "book2": {
            "title": "Twilight",
            "sequel": {
                "title": "New Moon",
            },
        },
    }
    assert mock_load_fn.call_count == 2
    assert mock_load_fn.call_args_list[0].args[0] == ["book2", "book3"]
    assert mock_load_fn.call_args_list[1].args[0] == ["book5", "book6"]


def test_deferred_execution_list():
    def load_fn(keys):
        return [BOOKS[key] for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_books(_, __):
        return [dataloader.load(id) for id in ["book1", "book2", "book3"]]

    def resolve_sequel(book, _):
        if book["sequel"]:
            return dataloader.load(book["sequel"])
        return None

    book = make_book_type(resolve_sequel)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "books": GraphQLField(
                    GraphQLList(book),
                    resolve=resolve_books,
                )
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            books {
                title
                sequel {
                    title
                }
            }
        }
        """,
    )

    assert not result.errors
    assert result.data == {
        "books": [
            {
                "title": "The Awakening",
                "sequel": None,
            },
            {
                "title": "City of Glass",
                "sequel": {
                    "title": "The New York Trilogy",
                },
            },
            {
                "title": "Twilight",
                "sequel": {
                    "title": "New Moon",
                },
            },
        ],
    }
    assert mock_load_fn.call_count == 2


def test_deferred_execution_errors():
    BOOKS_WITH_ERROR = {
        "book1": {"title": "The Awakening", "sequel": "book2"},
        "book2": ValueError("City of Glass is out of print"),
        "book3": {"title": "Twilight", "sequel": "book2"},
    }

    def load_fn(keys):
        return [BOOKS_WITH_ERROR[key] for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_books(_, __):
        return [dataloader.load(id) for id in BOOKS_WITH_ERROR]

    def resolve_sequel(book, _):
        if book["sequel"]:
            return dataloader.load(book["sequel"])
        return None

    book = make_book_type(resolve_sequel)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "books": GraphQLField(
                    GraphQLList(book),
                    resolve=resolve_books,
                )
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            books {
                title
                sequel {
                    title
                }
            }
        }
        """,
    )

    assert result.errors == [
        {
            "message": "City of Glass is out of print",
            "locations": [(3, 13)],
            "path": ["books", 1],
        },
        {
            "message": "City of Glass is out of print",
            "locations": [(5, 17)],
            "path": ["books", 0, "sequel"],
        },
        {
            "message": "City of Glass is out of print",
            "locations": [(5, 17)],
            "path": ["books", 2, "sequel"],
        },
    ]
    assert result.data == {
        "books": [
            {
                "title": "The Awakening",
                "sequel": None,
            },
            None,
            {
                "title": "Twilight",
                "sequel": None,
            },
        ],
    }
    assert mock_load_fn.call_count == 1


def test_batch_function_failure():
    def load_fn(keys):
        raise ConnectionError("store unavailable")

    dataloader = SyncDataLoader(load_fn)

    def resolve_name(_, __, id):
        return dataloader.load(id)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "authorName": GraphQLField(
                    GraphQLString,
                    args={"id": GraphQLArgument(GraphQLString)},
                    resolve=resolve_name,
                ),
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            name1: authorName(id: "author1")
            name2: authorName(id: "author2")
        }
        """,
    )

    assert result.data == {"name1": None, "name2": None}
    assert [error.message for error in result.errors] == [
        "store unavailable",
        "store unavailable",
    ]


def test_batch_function_wrong_length():
    dataloader = SyncDataLoader(lambda keys: ["Kate Chopin"])

    def resolve_name(_, __, id):
        return dataloader.load(id)

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "authorName": GraphQLField(
                    GraphQLString,
                    args={"id": GraphQLArgument(GraphQLString)},
                    resolve=resolve_name,
                ),
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            name1: authorName(id: "author1")
            name2: authorName(id: "author2")
        }
        """,
    )

    assert result.data == {"name1": None, "name2": None}
    assert len(result.errors) == 2
    assert "one value per key" in result.errors[0].message


def test_result_field_ordering():
    def load_fn(keys):
        return [AUTHOR_NAMES[key] for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_name(_, __, id):
        return dataloader.load(id)

    def resolve_hello(_, __, name):
        return f"hello {name}"

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "authorName": GraphQLField(
                    GraphQLString,
                    args={
                        "id": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_name,
                ),
                "hello": GraphQLField(
                    GraphQLString,
                    args={
                        "name": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_hello,
                ),
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            name1: authorName(id: "author1")
            hello1: hello(name: "kate")
            name2: authorName(id: "author2")
            hello2: hello(name: "paul")
        }
        """,
    )

    assert not result.errors
    assert result.data
    assert result.data == {
        "name1": "Kate Chopin",
        "hello1": "hello kate",
        "name2": "Paul Auster",
        "hello2": "hello paul",
    }
    keys = list(result.data.keys())
    assert keys == ["name1", "hello1", "name2", "hello2"]
    assert mock_load_fn.call_count == 1


def test_chaining_dataloader():
    def load_fn(keys):
        return [BOOKS.get(key) for key in keys]

    mock_load_fn = Mock(wraps=load_fn)
    dataloader = SyncDataLoader(mock_load_fn)

    def resolve_title(_, __, bookId):
        return dataloader.load(bookId).then(lambda book: book["title"])

    def resolve_sequel_title(_, __, bookId):
        return (
            dataloader.load(bookId)
            .then(lambda book: dataloader.load(book["sequel"]))
            .then(lambda book: book["title"])
        )

    schema = GraphQLSchema(
        query=GraphQLObjectType(
            name="Query",
            fields={
                "title": GraphQLField(
                    GraphQLString,
                    args={
                        "bookId": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_title,
                ),
                "sequelTitle": GraphQLField(
                    GraphQLString,
                    args={
                        "bookId": GraphQLArgument(GraphQLString),
                    },
                    resolve=resolve_sequel_title,
                ),
            },
        )
    )

    result = graphql_sync_deferred(
        schema,
        """
        query {
            title1: title(bookId: "book2")
            title2: title(bookId: "book3")
            sequel1: sequelTitle(bookId: "book2")
            sequel2: sequelTitle(bookId: "book3")
        }
        """,
    )

    assert not result.errors
    assert result.data == {
        "title1": "City of Glass",
        "title2": "Twilight",
        "sequel1": "The New York Trilogy",
        "sequel2": "New Moon",
    }
    assert mock_load_fn.call_count == 2
    assert mock_load_fn.call_args_list[0].args[0] == ["book2", "book3"]
    assert mock_load_fn.call_args_list[1].args[0] == ["book5", "book6"]


def test_load_outside_deferred_execution():
    dataloader = SyncDataLoader(lambda keys: keys)

    with pytest.raises(RuntimeError):
        dataloader.load("book1")
