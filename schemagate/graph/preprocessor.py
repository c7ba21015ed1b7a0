"""Recursive, memoized schema preprocessor.

:func:`preprocess_schema` walks a :class:`SchemaConfig` and builds a new,
parallel type graph in which every node gated behind a :class:`Conditional`
whose predicate fails is absent, together with every field, argument,
interface entry and auxiliary type that referenced it. Input nodes are never
mutated.

Dispatch is by :class:`TypeNodeKind`:

* list / non-null wrappers are rewritten around their rewritten inner type and
  are excluded when it is;
* a conditional resolves to its rewritten inner type or to exclusion (the
  inner type is not visited in that case);
* scalars pass through, except ``DateTime`` which gets fixed literal parsing;
* enums have their gated values filtered;
* objects, interfaces, unions and input objects are always included, with
  their member maps rebuilt lazily through thunks.

The lazy member maps make cyclic schemas safe: a composite is committed to
the run's :class:`VisitCache` before any of its members is visited, so a
field that refers back to its own type resolves to the same rewritten node.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from graphql import (
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLType,
    GraphQLUnionType,
    is_specified_directive,
)

from schemagate.config.schema import PreprocessorConfig
from schemagate.errors import SchemaDefinitionError
from schemagate.graph.cache import VisitCache
from schemagate.graph.filters import (
    filter_arguments,
    filter_enum_values,
    filter_fields,
    filter_input_fields,
    filter_interfaces,
    rewrite_members,
)
from schemagate.graph.nodes import (
    Conditional,
    TypeNodeKind,
    classify,
    declared_members,
    node_identity,
)
from schemagate.graph.resolvers import wrap_resolve_type
from schemagate.graph.scalars import fix_datetime_scalar, is_datetime_scalar
from schemagate.graph.schema_config import SchemaConfig

logger = logging.getLogger("schemagate.graph.preprocessor")


def _read_members(node: Any, attribute: str) -> Any:
    """Resolve a lazy member map of an input node.

    Field maps go through graphql-core's accessors. Interface and union
    member lists may hold Conditional entries, which those accessors reject,
    so their thunks are resolved directly. Any failure means the schema was
    authored incorrectly.
    """
    try:
        if attribute == "fields":
            return getattr(node, attribute)
        return declared_members(node, attribute)
    except Exception as exc:  # noqa: BLE001 - thunks may raise anything
        raise SchemaDefinitionError(
            f"cannot resolve {attribute} of type {node.name}: {exc}"
        ) from exc


class Preprocessor:
    """One preprocessing run.

    The instance owns the run's cache; the thunks it creates keep it alive
    until the rewritten graph has been fully materialized.
    """

    def __init__(self, config: PreprocessorConfig, cache: Optional[VisitCache] = None) -> None:
        self.config = config
        self.cache = cache if cache is not None else VisitCache()
        self._handlers: Dict[TypeNodeKind, Callable[[Any], Optional[GraphQLType]]] = {
            TypeNodeKind.LIST: self._process_list,
            TypeNodeKind.NON_NULL: self._process_non_null,
            TypeNodeKind.CONDITIONAL: self._process_conditional,
            TypeNodeKind.SCALAR: self._process_scalar,
            TypeNodeKind.ENUM: self._process_enum,
            TypeNodeKind.OBJECT: self._process_object,
            TypeNodeKind.INTERFACE: self._process_interface,
            TypeNodeKind.UNION: self._process_union,
            TypeNodeKind.INPUT_OBJECT: self._process_input_object,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process_schema(self, schema: SchemaConfig) -> SchemaConfig:
        """Rewrite roots, auxiliary types and directives of ``schema``."""
        result = SchemaConfig(
            query=self._process_root("query", schema.query),
            mutation=self._process_root("mutation", schema.mutation),
            subscription=self._process_root("subscription", schema.subscription),
            description=schema.description,
        )
        for named in schema.types:
            new_type = self.process_type(named)
            if new_type is None:
                logger.debug("Dropping auxiliary type %s", named)
                continue
            result.types.append(new_type)
        if schema.directives is not None:
            result.directives = [self._process_directive(d) for d in schema.directives]

        excluded = self.cache.excluded()
        logger.info(
            "Preprocessed schema: %d type node(s) visited, %d excluded, %d auxiliary type(s) kept",
            len(self.cache),
            len(excluded),
            len(result.types),
        )
        return result

    def process_type(self, node: Any) -> Optional[GraphQLType]:
        """Rewrite ``node``; None means it is excluded.

        Raises:
            UnknownTypeNodeError: If ``node`` is not a known variant.
        """
        result, found = self.cache.get(node)
        if found:
            return result
        kind = classify(node)
        result = self._handlers[kind](node)
        self.cache.put(node, result)
        return result

    def stats(self) -> Dict[str, int]:
        """Counts of visited and excluded node identities so far."""
        return {"visited": len(self.cache), "excluded": len(self.cache.excluded())}

    # ------------------------------------------------------------------
    # Roots and directives
    # ------------------------------------------------------------------

    def _process_root(
        self, operation: str, root: Optional[GraphQLObjectType]
    ) -> Optional[GraphQLObjectType]:
        if root is None:
            return None
        new_root = self.process_type(root)
        if new_root is None:
            raise SchemaDefinitionError(f"{operation} root type {root} cannot be excluded")
        if not isinstance(new_root, GraphQLObjectType):
            raise SchemaDefinitionError(
                f"{operation} root type must be an object type, got {new_root}"
            )
        return new_root

    def _process_directive(self, directive: GraphQLDirective) -> GraphQLDirective:
        if is_specified_directive(directive):
            return directive
        return GraphQLDirective(
            name=directive.name,
            locations=directive.locations,
            args=filter_arguments(f"@{directive.name}", directive.args, self.process_type),
            is_repeatable=directive.is_repeatable,
            description=directive.description,
            extensions=directive.extensions,
            ast_node=directive.ast_node,
        )

    # ------------------------------------------------------------------
    # Variant handlers
    # ------------------------------------------------------------------

    def _process_list(self, node: GraphQLList) -> Optional[GraphQLType]:
        of_type = self.process_type(node.of_type)
        if of_type is None:
            return None
        return GraphQLList(of_type)

    def _process_non_null(self, node: GraphQLNonNull) -> Optional[GraphQLType]:
        of_type = self.process_type(node.of_type)
        if of_type is None:
            return None
        return GraphQLNonNull(of_type)  # type: ignore[arg-type]

    def _process_conditional(self, node: Conditional) -> Optional[GraphQLType]:
        if not node.is_enabled(self.config):
            logger.debug("Condition not met for %s; excluding %s", node_identity(node), node.of_type)
            return None
        return self.process_type(node.of_type)

    def _process_scalar(self, node: GraphQLScalarType) -> GraphQLType:
        if is_datetime_scalar(node):
            return fix_datetime_scalar(node)
        return node

    def _process_enum(self, node: GraphQLEnumType) -> GraphQLType:
        return GraphQLEnumType(
            node.name,
            filter_enum_values(node.name, node.values, self.config),
            description=node.description,
            extensions=node.extensions,
            ast_node=node.ast_node,
            extension_ast_nodes=node.extension_ast_nodes,
        )

    def _process_input_object(self, node: GraphQLInputObjectType) -> GraphQLType:
        def fields() -> Dict[str, Any]:
            return filter_input_fields(node.name, _read_members(node, "fields"), self.process_type)

        return GraphQLInputObjectType(
            node.name,
            fields,
            description=node.description,
            out_type=node.out_type,
            extensions=node.extensions,
            ast_node=node.ast_node,
            extension_ast_nodes=node.extension_ast_nodes,
        )

    def _process_object(self, node: GraphQLObjectType) -> GraphQLType:
        def fields() -> Dict[str, Any]:
            return filter_fields(node.name, _read_members(node, "fields"), self.process_type)

        def interfaces() -> List[GraphQLInterfaceType]:
            return filter_interfaces(node.name, _read_members(node, "interfaces"), self.process_type)

        return GraphQLObjectType(
            node.name,
            fields,
            interfaces=interfaces,
            is_type_of=node.is_type_of,
            description=node.description,
            extensions=node.extensions,
            ast_node=node.ast_node,
            extension_ast_nodes=node.extension_ast_nodes,
        )

    def _process_interface(self, node: GraphQLInterfaceType) -> GraphQLType:
        def fields() -> Dict[str, Any]:
            return filter_fields(node.name, _read_members(node, "fields"), self.process_type)

        def interfaces() -> List[GraphQLInterfaceType]:
            return filter_interfaces(node.name, _read_members(node, "interfaces"), self.process_type)

        return GraphQLInterfaceType(
            node.name,
            fields,
            interfaces=interfaces,
            resolve_type=wrap_resolve_type(node.resolve_type),
            description=node.description,
            extensions=node.extensions,
            ast_node=node.ast_node,
            extension_ast_nodes=node.extension_ast_nodes,
        )

    def _process_union(self, node: GraphQLUnionType) -> GraphQLType:
        def types() -> List[GraphQLObjectType]:
            return rewrite_members(node.name, _read_members(node, "types"), self.process_type)

        return GraphQLUnionType(
            node.name,
            types,
            resolve_type=wrap_resolve_type(node.resolve_type),
            description=node.description,
            extensions=node.extensions,
            ast_node=node.ast_node,
            extension_ast_nodes=node.extension_ast_nodes,
        )


def preprocess_schema(
    schema: SchemaConfig, config: Optional[PreprocessorConfig] = None
) -> SchemaConfig:
    """Return a copy of ``schema`` with gated surface resolved against ``config``.

    Each call uses its own cache, so concurrent calls never share state.

    Args:
        schema: Input descriptor; may contain conditional markers.
        config: Feature toggles. Defaults to ``PreprocessorConfig.default()``.

    Returns:
        New descriptor with excluded nodes and their dependents removed.

    Raises:
        UnknownTypeNodeError: An unrecognized node reached dispatch.
        SchemaDefinitionError: A root would be excluded, or (when lazy maps
            are forced) an input member map failed to resolve.
    """
    preprocessor = Preprocessor(config or PreprocessorConfig.default())
    return preprocessor.process_schema(schema)


__all__ = ["Preprocessor", "preprocess_schema"]
