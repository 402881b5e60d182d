from typing import Dict, Type

from graphql import (
    ASTValidationRule,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLError,
    InlineFragmentNode,
    Node,
    OperationDefinitionNode,
    ValidationContext,
)

DEFAULT_MAX_DEPTH = 10


def depth_limit_rule(max_depth: int = DEFAULT_MAX_DEPTH) -> Type[ASTValidationRule]:
    """Build a validation rule rejecting operations nested deeper than ``max_depth``.

    Root fields sit at depth 0 and every nested selection set adds one.
    Fragments add no depth and introspection fields are not counted.
    """

    class DepthLimitRule(ASTValidationRule):
        def __init__(self, context: ValidationContext):
            super().__init__(context)
            self.reported = False
            self.fragments: Dict[str, FragmentDefinitionNode] = {
                definition.name.value: definition
                for definition in context.document.definitions
                if isinstance(definition, FragmentDefinitionNode)
            }

        def enter_operation_definition(
            self, node: OperationDefinitionNode, *_args
        ) -> None:
            name = node.name.value if node.name else "anonymous"
            self.reported = False
            self._measure(node, 0, name, set())

        def _measure(self, node: Node, depth: int, name: str, visited: set) -> int:
            if self.reported:
                return 0
            if depth > max_depth:
                # once per operation
                self.reported = True
                self.report_error(
                    GraphQLError(
                        f"'{name}' exceeds maximum operation depth of {max_depth}",
                        node,
                    )
                )
                return depth

            if isinstance(node, FieldNode):
                if node.name.value.startswith("__") or not node.selection_set:
                    return 0
                return 1 + max(
                    self._measure(selection, depth + 1, name, visited)
                    for selection in node.selection_set.selections
                )

            if isinstance(node, FragmentSpreadNode):
                fragment_name = node.name.value
                fragment = self.fragments.get(fragment_name)
                # unknown and cyclic spreads are reported by the standard rules
                if fragment is None or fragment_name in visited:
                    return 0
                return self._measure(
                    fragment, depth, name, visited | {fragment_name}
                )

            if isinstance(
                node,
                (InlineFragmentNode, FragmentDefinitionNode, OperationDefinitionNode),
            ):
                return max(
                    (
                        self._measure(selection, depth, name, visited)
                        for selection in node.selection_set.selections
                    ),
                    default=0,
                )

            return 0

    return DepthLimitRule
