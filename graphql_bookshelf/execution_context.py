from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from graphql import (
    ExecutionContext,
    FieldNode,
    GraphQLError,
    GraphQLList,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLResolveInfo,
    OperationDefinitionNode,
    located_error,
)
from graphql.execution.execute import get_field_def
from graphql.execution.values import get_argument_values
from graphql.pyutils import AwaitableOrValue, Path, Undefined, is_iterable

from .dataloader import BatchDispatcher, current_dispatcher
from .sync_future import SyncFuture

# keeps a field's position in the result while its value is pending
PENDING_VALUE = object()


def _identity(value: Any) -> Any:
    return value


class DeferredExecutionContext(ExecutionContext):
    """Execution for working with synchronous Futures.

    Resolvers may return a SyncFuture (usually from a SyncDataLoader) or a
    list of them. Loader batches are dispatched after every field that can
    be resolved has been visited, and the operation result is assembled
    from the settled futures before it is returned.
    """

    def execute_operation(
        self, operation: OperationDefinitionNode, root_value: Any
    ) -> Optional[AwaitableOrValue[Any]]:
        with BatchDispatcher():
            result = super().execute_operation(operation, root_value)

        if isinstance(result, SyncFuture):
            if not result.done():
                raise RuntimeError("GraphQL deferred execution failed to complete.")
            return result.result()

        return result

    def execute_fields(
        self,
        parent_type: GraphQLObjectType,
        source_value: Any,
        path: Optional[Path],
        fields: Dict[str, List[FieldNode]],
    ) -> Union[Dict[str, Any], SyncFuture]:
        results: Dict[str, Any] = {}
        unresolved = 0
        future = SyncFuture()

        def settle(response_name: str, pending: SyncFuture, _: Any) -> None:
            nonlocal unresolved
            value = pending.result()
            if value is Undefined:
                del results[response_name]
            else:
                results[response_name] = value
            unresolved -= 1
            if not unresolved:
                future.set_result(results)

        for response_name, field_nodes in fields.items():
            field_path = Path(path, response_name, parent_type.name)
            result = self.execute_field(
                parent_type, source_value, field_nodes, field_path
            )
            if isinstance(result, SyncFuture):
                if not result.done():
                    results[response_name] = PENDING_VALUE
                    unresolved += 1
                    result.add_done_callback(partial(settle, response_name, result))
                    continue
                result = result.result()
            if result is not Undefined:
                results[response_name] = result

        if not unresolved:
            return results
        return future

    def execute_fields_serially(
        self,
        parent_type: GraphQLObjectType,
        source_value: Any,
        path: Optional[Path],
        fields: Dict[str, List[FieldNode]],
    ) -> Dict[str, Any]:
        """Execute mutation fields one at a time.

        Every loader batch queued by a field runs before the next field
        starts, so a field's subtree never observes writes made by the
        fields after it.
        """
        dispatcher = current_dispatcher()
        results: Dict[str, Any] = {}
        for response_name, field_nodes in fields.items():
            field_path = Path(path, response_name, parent_type.name)
            result = self.execute_field(
                parent_type, source_value, field_nodes, field_path
            )
            if isinstance(result, SyncFuture):
                if dispatcher is not None:
                    dispatcher.run_all_callbacks()
                if not result.done():
                    raise RuntimeError(
                        "GraphQL deferred execution failed to complete."
                    )
                result = result.result()
            if result is not Undefined:
                results[response_name] = result
        return results

    def execute_field(
        self,
        parent_type: GraphQLObjectType,
        source: Any,
        field_nodes: List[FieldNode],
        path: Path,
    ) -> AwaitableOrValue[Any]:
        field_def = get_field_def(self.schema, parent_type, field_nodes[0])
        if not field_def:
            return Undefined
        return_type = field_def.type
        resolve_fn = field_def.resolve or self.field_resolver
        if self.middleware_manager:
            resolve_fn = self.middleware_manager.get_field_resolver(resolve_fn)
        info = self.build_resolve_info(field_def, field_nodes, parent_type, path)
        try:
            args = get_argument_values(field_def, field_nodes[0], self.variable_values)
            result = resolve_fn(source, info, **args)

            if isinstance(result, SyncFuture):
                if not result.done():
                    return self._defer(
                        result,
                        partial(self.complete_value, return_type, field_nodes, info, path),
                        field_nodes,
                        path,
                        return_type,
                    )
                result = result.result()

            completed = self.complete_value(return_type, field_nodes, info, path, result)
            if isinstance(completed, SyncFuture):
                if not completed.done():
                    return self._defer(
                        completed, _identity, field_nodes, path, return_type
                    )
                completed = completed.result()
            return completed
        except Exception as raw_error:
            error = located_error(raw_error, field_nodes, path.as_list())
            self.handle_field_error(error, return_type)
            return None

    def complete_list_value(
        self,
        return_type: GraphQLList[GraphQLOutputType],
        field_nodes: List[FieldNode],
        info: GraphQLResolveInfo,
        path: Path,
        result: Iterable[Any],
    ) -> Union[List[Any], SyncFuture]:
        if isinstance(result, SyncFuture):
            complete = partial(
                self.complete_list_value, return_type, field_nodes, info, path
            )
            if result.done():
                return complete(result.result())
            return self._defer(result, complete, field_nodes, path, return_type)

        if not is_iterable(result):
            raise GraphQLError(
                "Expected Iterable, but did not find one for field"
                f" '{info.parent_type.name}.{info.field_name}'."
            )

        item_type = return_type.of_type
        items = list(result)
        completed_items: List[Any] = [None] * len(items)
        unresolved = 0
        future = SyncFuture()

        def store(index: int, pending: SyncFuture, _: Any) -> None:
            nonlocal unresolved
            completed_items[index] = pending.result()
            unresolved -= 1
            if not unresolved:
                future.set_result(completed_items)

        for index, item in enumerate(items):
            item_path = path.add_key(index, None)
            try:
                if isinstance(item, SyncFuture):
                    if not item.done():
                        pending = self._defer(
                            item,
                            partial(
                                self.complete_value,
                                item_type,
                                field_nodes,
                                info,
                                item_path,
                            ),
                            field_nodes,
                            item_path,
                            item_type,
                        )
                        unresolved += 1
                        pending.add_done_callback(partial(store, index, pending))
                        continue
                    item = item.result()

                completed = self.complete_value(
                    item_type, field_nodes, info, item_path, item
                )
                if isinstance(completed, SyncFuture):
                    if not completed.done():
                        pending = self._defer(
                            completed, _identity, field_nodes, item_path, item_type
                        )
                        unresolved += 1
                        pending.add_done_callback(partial(store, index, pending))
                        continue
                    completed = completed.result()
                completed_items[index] = completed
            except Exception as raw_error:
                error = located_error(raw_error, field_nodes, item_path.as_list())
                self.handle_field_error(error, item_type)

        if not unresolved:
            return completed_items
        return future

    def _defer(
        self,
        pending: SyncFuture,
        complete: Callable[[Any], Any],
        field_nodes: List[FieldNode],
        path: Path,
        return_type: GraphQLOutputType,
    ) -> SyncFuture:
        """Complete the value of ``pending`` once it settles.

        The returned future always settles with a value: errors raised while
        completing are recorded against ``path`` and the value becomes None.
        """
        deferred = SyncFuture()

        def fail(raw_error: Exception) -> None:
            error = located_error(raw_error, field_nodes, path.as_list())
            self.handle_field_error(error, return_type)
            deferred.set_result(None)

        def finish(completed: Any) -> None:
            if isinstance(completed, SyncFuture):
                if not completed.done():
                    completed.add_done_callback(lambda _: finish(completed))
                    return
                try:
                    completed = completed.result()
                except Exception as raw_error:
                    fail(raw_error)
                    return
            deferred.set_result(completed)

        def settle(_: Any) -> None:
            try:
                completed = complete(pending.result())
            except Exception as raw_error:
                fail(raw_error)
                return
            finish(completed)

        pending.add_done_callback(settle)
        return deferred
