"""Exclusion propagation into composite members.

Each filter rewrites one kind of member map of a composite type. The type of
every member is passed through ``process`` (the preprocessor's dispatcher);
a member whose type resolves to exclusion is dropped at its own granularity:

* fields and input fields are removed from their container;
* arguments are removed from their field, which itself survives;
* enum values are kept or removed by their own predicate;
* interfaces are removed from the implementing type's interface list.

Filters are only called from inside the lazy thunks of the rewritten
container, never while the container is being constructed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from graphql import (
    GraphQLArgument,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLInputField,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLType,
)

from schemagate.config.schema import PreprocessorConfig
from schemagate.graph.nodes import ConditionalEnumValue
from schemagate.graph.resolvers import wrap_resolver

logger = logging.getLogger("schemagate.graph.filters")

TypeProcessor = Callable[[Any], Optional[GraphQLType]]


def filter_arguments(
    owner: str, args: Mapping[str, GraphQLArgument], process: TypeProcessor
) -> Dict[str, GraphQLArgument]:
    """Rewrite argument types, dropping arguments whose type is excluded.

    Args:
        owner: ``Type.field`` (or ``@directive``) label used for logging.
        args: Argument map of the input field.
        process: Type node dispatcher.

    Returns:
        New argument map.
    """
    result: Dict[str, GraphQLArgument] = {}
    for name, arg in args.items():
        new_type = process(arg.type)
        if new_type is None:
            logger.debug("Dropping argument %s(%s): type %s excluded", owner, name, arg.type)
            continue
        result[name] = GraphQLArgument(
            new_type,
            default_value=arg.default_value,
            description=arg.description,
            deprecation_reason=arg.deprecation_reason,
            out_name=arg.out_name,
            extensions=arg.extensions,
            ast_node=arg.ast_node,
        )
    return result


def filter_field(
    owner: str, name: str, field: GraphQLField, process: TypeProcessor
) -> Optional[GraphQLField]:
    """Rewrite one output field; None when its type is excluded."""
    new_type = process(field.type)
    if new_type is None:
        logger.debug("Dropping field %s.%s: type %s excluded", owner, name, field.type)
        return None
    return GraphQLField(
        new_type,
        args=filter_arguments(f"{owner}.{name}", field.args, process),
        resolve=wrap_resolver(field.resolve),
        subscribe=field.subscribe,
        description=field.description,
        deprecation_reason=field.deprecation_reason,
        extensions=field.extensions,
        ast_node=field.ast_node,
    )


def filter_fields(
    owner: str, fields: Mapping[str, GraphQLField], process: TypeProcessor
) -> Dict[str, GraphQLField]:
    """Rewrite the field map of an object or interface type."""
    result: Dict[str, GraphQLField] = {}
    for name, field in fields.items():
        new_field = filter_field(owner, name, field, process)
        if new_field is not None:
            result[name] = new_field
    return result


def filter_input_fields(
    owner: str, fields: Mapping[str, GraphQLInputField], process: TypeProcessor
) -> Dict[str, GraphQLInputField]:
    """Rewrite the field map of an input object type."""
    result: Dict[str, GraphQLInputField] = {}
    for name, field in fields.items():
        new_type = process(field.type)
        if new_type is None:
            logger.debug("Dropping input field %s.%s: type %s excluded", owner, name, field.type)
            continue
        result[name] = GraphQLInputField(
            new_type,
            default_value=field.default_value,
            description=field.description,
            deprecation_reason=field.deprecation_reason,
            out_name=field.out_name,
            extensions=field.extensions,
            ast_node=field.ast_node,
        )
    return result


def filter_enum_values(
    owner: str, values: Mapping[str, GraphQLEnumValue], config: PreprocessorConfig
) -> Dict[str, GraphQLEnumValue]:
    """Keep ungated enum values and gated ones whose predicate holds.

    Values are independent of each other and of the type graph.
    """
    result: Dict[str, GraphQLEnumValue] = {}
    for name, value in values.items():
        payload = value.value
        if isinstance(payload, ConditionalEnumValue):
            if not payload.is_enabled(config):
                logger.debug("Dropping enum value %s.%s: condition not met", owner, name)
                continue
            inner = payload.value
            result[name] = GraphQLEnumValue(
                inner.value,
                description=inner.description,
                deprecation_reason=inner.deprecation_reason,
                extensions=inner.extensions,
                ast_node=inner.ast_node,
            )
            continue
        result[name] = GraphQLEnumValue(
            payload,
            description=value.description,
            deprecation_reason=value.deprecation_reason,
            extensions=value.extensions,
            ast_node=value.ast_node,
        )
    return result


def filter_interfaces(
    owner: str, interfaces: Iterable[Any], process: TypeProcessor
) -> List[GraphQLInterfaceType]:
    """Rewrite declared interfaces, omitting the ones that are excluded."""
    result: List[GraphQLInterfaceType] = []
    for iface in interfaces:
        new_iface = process(iface)
        if new_iface is None:
            logger.debug("Dropping interface %s from %s: excluded", iface, owner)
            continue
        result.append(new_iface)  # type: ignore[arg-type]
    return result


def rewrite_members(
    owner: str, members: Iterable[Any], process: TypeProcessor
) -> List[GraphQLObjectType]:
    """Rewrite union members; members are always included in full."""
    result: List[GraphQLObjectType] = []
    for member in members:
        new_member = process(member)
        if new_member is None:
            # Only a Conditional-wrapped member can resolve to exclusion.
            logger.debug("Union %s member %s excluded", owner, member)
            continue
        result.append(new_member)  # type: ignore[arg-type]
    return result


__all__ = [
    "TypeProcessor",
    "filter_arguments",
    "filter_enum_values",
    "filter_field",
    "filter_fields",
    "filter_input_fields",
    "filter_interfaces",
    "rewrite_members",
]
