from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLList,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    assert_valid_schema,
    print_schema,
)

from . import resolvers
from .logging import get_logger

logger = get_logger(__name__)


book_type: GraphQLObjectType = GraphQLObjectType(
    name="Book",
    fields=lambda: {
        "id": GraphQLField(GraphQLString),
        "title": GraphQLField(GraphQLString),
        "authorId": GraphQLField(
            GraphQLString, resolve=lambda book, _: book.author_id
        ),
        "author": GraphQLField(author_type, resolve=resolvers.resolve_book_author),
    },
)

author_type: GraphQLObjectType = GraphQLObjectType(
    name="Author",
    fields=lambda: {
        "id": GraphQLField(GraphQLString),
        "name": GraphQLField(GraphQLString),
        "books": GraphQLField(
            GraphQLList(book_type), resolve=resolvers.resolve_author_books
        ),
    },
)

query_type = GraphQLObjectType(
    name="Query",
    fields={
        "books": GraphQLField(GraphQLList(book_type), resolve=resolvers.resolve_books),
        "authors": GraphQLField(
            GraphQLList(author_type), resolve=resolvers.resolve_authors
        ),
        "getBookById": GraphQLField(
            book_type,
            args={
                "id": GraphQLArgument(GraphQLString),
            },
            resolve=resolvers.resolve_book_by_id,
        ),
        "getAuthorById": GraphQLField(
            author_type,
            args={
                "id": GraphQLArgument(GraphQLString),
            },
            resolve=resolvers.resolve_author_by_id,
        ),
    },
)

mutation_type = GraphQLObjectType(
    name="Mutation",
    fields={
        "addBook": GraphQLField(
            book_type,
            args={
                "id": GraphQLArgument(GraphQLString),
                "title": GraphQLArgument(GraphQLString),
                "authorId": GraphQLArgument(GraphQLString),
            },
            resolve=resolvers.resolve_add_book,
        ),
    },
)

schema = GraphQLSchema(query=query_type, mutation=mutation_type)


def validate_schema(graphql_schema: GraphQLSchema = schema) -> None:
    """Fail fast on an invalid schema.

    Raises:
        TypeError: listing every problem graphql-core found
    """
    try:
        assert_valid_schema(graphql_schema)
    except TypeError as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise
    logger.debug("GraphQL schema validation successful")


def schema_sdl(graphql_schema: GraphQLSchema = schema) -> str:
    return print_schema(graphql_schema)
