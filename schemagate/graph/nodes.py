"""Type node model for schema preprocessing.

A schema is a graph of graphql-core type nodes. Besides the regular named and
wrapping types, the graph may contain :class:`Conditional` markers that gate
their inner node behind a predicate over :class:`PreprocessorConfig`, and enum
values whose payload is a :class:`ConditionalEnumValue`. Both markers exist
only in the input graph; preprocessing unwraps or drops them before anything
is handed to the execution engine.

The set of accepted node classes is closed. :func:`classify` maps a node to
its :class:`TypeNodeKind` and fails loudly on anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Type, Union

from graphql import (
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLType,
    GraphQLUnionType,
    GraphQLWrappingType,
    resolve_thunk,
)

from schemagate.config.schema import PreprocessorConfig
from schemagate.errors import UnknownTypeNodeError

Condition = Callable[[PreprocessorConfig], bool]

BETA_SUFFIX = "β"


class TypeNodeKind(str, Enum):
    """Closed set of type node variants understood by the preprocessor."""

    LIST = "list"
    NON_NULL = "non_null"
    CONDITIONAL = "conditional"
    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    INPUT_OBJECT = "input_object"


class Conditional(GraphQLWrappingType):
    """Include ``of_type`` only when ``condition(config)`` holds.

    The marker subclasses graphql-core's wrapping type so it can be placed
    anywhere a type is accepted while the schema is being authored. Its
    identity string carries ``suffix`` to keep gated variants apart from
    ungated uses of the same inner type.
    """

    def __init__(self, type_: GraphQLType, condition: Condition, suffix: str = BETA_SUFFIX) -> None:
        super().__init__(type_)
        self.condition = condition
        self.suffix = suffix

    @property
    def name(self) -> str:
        return f"{getattr(self.of_type, 'name', self.of_type)}{self.suffix}"

    @property
    def description(self) -> Optional[str]:
        return getattr(self.of_type, "description", None)

    def is_enabled(self, config: PreprocessorConfig) -> bool:
        return bool(self.condition(config))

    def __str__(self) -> str:
        return f"{self.of_type}{self.suffix}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self}>"


@dataclass(frozen=True, eq=False)
class ConditionalEnumValue:
    """Enum value payload that keeps ``value`` only when ``condition`` holds."""

    value: GraphQLEnumValue
    condition: Condition

    def is_enabled(self, config: PreprocessorConfig) -> bool:
        return bool(self.condition(config))


def beta_enabled(config: PreprocessorConfig) -> bool:
    """Default predicate: include only when beta features are enabled."""
    return config.beta_features_enabled


def conditional(
    of_type: GraphQLType, condition: Condition, suffix: str = BETA_SUFFIX
) -> Conditional:
    """Wrap ``of_type`` in a :class:`Conditional` with a custom predicate."""
    return Conditional(of_type, condition, suffix)


def beta(of_type: GraphQLType) -> Conditional:
    """Gate a type node behind the beta-features toggle.

    Example:
        >>> fields = {"preview": GraphQLField(beta(PreviewType))}
    """
    return Conditional(of_type, beta_enabled, BETA_SUFFIX)


def conditional_enum(value: Any, condition: Condition) -> GraphQLEnumValue:
    """Wrap an enum value config so it is kept only when ``condition`` holds.

    Args:
        value: A :class:`GraphQLEnumValue` or a raw internal value.
        condition: Predicate over the preprocessor configuration.

    Returns:
        GraphQLEnumValue whose payload is a :class:`ConditionalEnumValue`.
    """
    if not isinstance(value, GraphQLEnumValue):
        value = GraphQLEnumValue(value)
    return GraphQLEnumValue(ConditionalEnumValue(value=value, condition=condition))


def beta_enum(value: Any) -> GraphQLEnumValue:
    """Gate an enum value behind the beta-features toggle."""
    return conditional_enum(value, beta_enabled)


# Order matters only for readability; the classes are disjoint.
_VARIANTS: Tuple[Tuple[Type[Any], TypeNodeKind], ...] = (
    (GraphQLList, TypeNodeKind.LIST),
    (GraphQLNonNull, TypeNodeKind.NON_NULL),
    (Conditional, TypeNodeKind.CONDITIONAL),
    (GraphQLScalarType, TypeNodeKind.SCALAR),
    (GraphQLEnumType, TypeNodeKind.ENUM),
    (GraphQLObjectType, TypeNodeKind.OBJECT),
    (GraphQLInterfaceType, TypeNodeKind.INTERFACE),
    (GraphQLUnionType, TypeNodeKind.UNION),
    (GraphQLInputObjectType, TypeNodeKind.INPUT_OBJECT),
)

TYPE_NODE_VARIANTS: Tuple[Type[Any], ...] = tuple(cls for cls, _ in _VARIANTS)

TypeNode = Union[
    GraphQLList,
    GraphQLNonNull,
    Conditional,
    GraphQLScalarType,
    GraphQLEnumType,
    GraphQLObjectType,
    GraphQLInterfaceType,
    GraphQLUnionType,
    GraphQLInputObjectType,
]


def classify(node: Any) -> TypeNodeKind:
    """Return the variant of ``node``.

    Raises:
        UnknownTypeNodeError: If ``node`` is not one of the accepted variants.
    """
    for cls, kind in _VARIANTS:
        if isinstance(node, cls):
            return kind
    raise UnknownTypeNodeError(node)


def node_identity(node: Any) -> str:
    """Memoization key of a node: its name-based string representation.

    Two distinct nodes with the same string share one cache slot.
    """
    return str(node)


def declared_members(node: Any, attribute: str) -> List[Any]:
    """Return the ``interfaces`` or ``types`` list of ``node`` as authored.

    graphql-core's accessors accept only named types there, so a
    :class:`Conditional` entry would be rejected. The stored thunk is resolved
    directly instead; exceptions raised by the thunk propagate unchanged.
    """
    members = resolve_thunk(getattr(node, f"_{attribute}"))
    if members is None:
        return []
    return list(members)


def unwrap_named(node: Any) -> Any:
    """Strip list, non-null and conditional wrappers from ``node``."""
    while isinstance(node, GraphQLWrappingType):
        node = node.of_type
    return node


def is_gated(node: Any) -> bool:
    """Whether a :class:`Conditional` appears anywhere in the wrapper chain."""
    while isinstance(node, GraphQLWrappingType):
        if isinstance(node, Conditional):
            return True
        node = node.of_type
    return False


__all__ = [
    "BETA_SUFFIX",
    "Condition",
    "Conditional",
    "ConditionalEnumValue",
    "TYPE_NODE_VARIANTS",
    "TypeNode",
    "TypeNodeKind",
    "beta",
    "beta_enabled",
    "beta_enum",
    "classify",
    "conditional",
    "conditional_enum",
    "declared_members",
    "is_gated",
    "node_identity",
    "unwrap_named",
]
