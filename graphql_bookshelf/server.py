"""
FastAPI application serving the bookshelf schema
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from graphql import (
    ExecutionResult,
    GraphQLError,
    OperationDefinitionNode,
    OperationType,
    get_operation_ast,
    parse,
)

from .config import Settings, settings as default_settings
from .execution import execute_query
from .loaders import build_context
from .logging import get_logger
from .repository import Repositories
from .schema import schema, validate_schema

logger = get_logger(__name__)


def _error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        {"errors": [GraphQLError(message).formatted]}, status_code=status_code
    )


def _result_response(result: ExecutionResult) -> JSONResponse:
    # data=None means the document never ran: a request error
    status_code = 400 if result.data is None and result.errors else 200
    return JSONResponse(result.formatted, status_code=status_code)


def _is_mutation(query: str, operation_name: Optional[str]) -> bool:
    try:
        document = parse(query)
    except GraphQLError:
        return False
    operation: Optional[OperationDefinitionNode] = get_operation_ast(
        document, operation_name
    )
    return operation is not None and operation.operation == OperationType.MUTATION


def create_app(
    settings: Optional[Settings] = None,
    repositories: Optional[Repositories] = None,
) -> FastAPI:
    """Create the application.

    Every app owns its repositories; pass ``repositories`` to share or
    replace them.
    """
    settings = settings or default_settings
    repositories = repositories or Repositories.seeded()

    validate_schema(schema)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Server ready at: {settings.public_url}")
        yield
        logger.info("Server stopped")

    app = FastAPI(title="Bookshelf GraphQL API", lifespan=lifespan)
    app.state.settings = settings
    app.state.repositories = repositories

    def run(query: Any, variables: Any, operation_name: Any) -> JSONResponse:
        if not isinstance(query, str) or not query.strip():
            return _error_response("Must provide query string.")
        if variables is not None and not isinstance(variables, dict):
            return _error_response("Variables are invalid JSON.")
        if operation_name is not None and not isinstance(operation_name, str):
            return _error_response("Operation name must be a string.")

        result = execute_query(
            schema,
            query,
            variable_values=variables,
            operation_name=operation_name,
            context_value=build_context(repositories),
            max_depth=settings.max_query_depth,
        )
        return _result_response(result)

    @app.post(settings.graphql_path)
    def graphql_post(body: Dict[str, Any] = Body(...)) -> JSONResponse:
        return run(body.get("query"), body.get("variables"), body.get("operationName"))

    @app.get(settings.graphql_path)
    def graphql_get(request: Request) -> JSONResponse:
        params = request.query_params
        query = params.get("query")
        operation_name = params.get("operationName")
        if isinstance(query, str) and _is_mutation(query, operation_name):
            return _error_response(
                "Can only perform a mutation operation from a POST request.",
                status_code=405,
            )

        variables: Any = None
        if params.get("variables"):
            try:
                variables = json.loads(params["variables"])
            except ValueError:
                return _error_response("Variables are invalid JSON.")
        return run(query, variables, operation_name)

    return app
