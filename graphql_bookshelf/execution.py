from typing import Any, Dict, Optional

from graphql import (
    ExecutionResult,
    GraphQLError,
    GraphQLSchema,
    execute,
    parse,
    specified_rules,
    validate,
)

from .execution_context import DeferredExecutionContext
from .logging import get_logger
from .validation import DEFAULT_MAX_DEPTH, depth_limit_rule

logger = get_logger(__name__)


def execute_query(
    schema: GraphQLSchema,
    source: str,
    *,
    variable_values: Optional[Dict[str, Any]] = None,
    operation_name: Optional[str] = None,
    context_value: Any = None,
    root_value: Any = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ExecutionResult:
    """Parse, validate and execute a GraphQL document.

    Documents that fail to parse or validate (the depth limit included) are
    answered with ``data=None`` and never reach a resolver.
    """
    try:
        document = parse(source)
    except GraphQLError as error:
        logger.info("GraphQL syntax error", error=error.message)
        return ExecutionResult(data=None, errors=[error])

    validation_errors = validate(
        schema, document, [*specified_rules, depth_limit_rule(max_depth)]
    )
    if validation_errors:
        logger.info(
            "GraphQL validation failed",
            errors=[error.message for error in validation_errors],
        )
        return ExecutionResult(data=None, errors=validation_errors)

    result = execute(
        schema,
        document,
        root_value=root_value,
        context_value=context_value,
        variable_values=variable_values,
        operation_name=operation_name,
        execution_context_class=DeferredExecutionContext,
    )
    if result.errors:
        for error in result.errors:
            logger.warning(
                "GraphQL execution error",
                error=error.message,
                path=error.path,
                exc_info=error.original_error,
            )
    return result
