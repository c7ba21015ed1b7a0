"""DateTime scalar and the literal-parsing fix applied during preprocessing.

A ``DateTime`` scalar must parse an inline string literal exactly like the
same string passed as a variable. Scalars authored with a ``parse_literal``
that gets this wrong are replaced during preprocessing by a copy whose
literal parsing delegates string literals to ``parse_value``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from graphql import (
    GraphQLError,
    GraphQLScalarType,
    StringValueNode,
    ValueNode,
    print_ast,
)

DATETIME_SCALAR_NAME = "DateTime"


def _serialize_datetime(output_value: Any) -> str:
    if isinstance(output_value, datetime):
        return output_value.isoformat()
    if isinstance(output_value, str):
        return _parse_datetime(output_value).isoformat()
    raise GraphQLError(f"DateTime cannot represent value: {output_value!r}")


def _parse_datetime(input_value: Any) -> datetime:
    if isinstance(input_value, datetime):
        return input_value
    if not isinstance(input_value, str):
        raise GraphQLError(f"DateTime cannot represent non-string value: {input_value!r}")
    text = input_value.strip()
    # RFC 3339 allows a trailing "Z"; fromisoformat only accepts it from 3.11.
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise GraphQLError(f"DateTime cannot represent value: {input_value!r}") from exc


DateTime = GraphQLScalarType(
    name=DATETIME_SCALAR_NAME,
    description=(
        "The `DateTime` scalar type represents a DateTime. The DateTime is "
        "serialized as an RFC 3339 quoted string"
    ),
    serialize=_serialize_datetime,
    parse_value=_parse_datetime,
)


def is_datetime_scalar(scalar: GraphQLScalarType) -> bool:
    return scalar.name == DATETIME_SCALAR_NAME


def string_literal_parser(
    parse_value: Callable[[Any], Any], name: str = DATETIME_SCALAR_NAME
) -> Callable[..., Any]:
    """Build a ``parse_literal`` that parses string literals via ``parse_value``."""

    def parse_literal(
        value_node: ValueNode, _variables: Optional[Dict[str, Any]] = None
    ) -> Any:
        if isinstance(value_node, StringValueNode):
            return parse_value(value_node.value)
        raise GraphQLError(
            f"{name} cannot represent non-string value: {print_ast(value_node)}",
            value_node,
        )

    return parse_literal


def fix_datetime_scalar(scalar: GraphQLScalarType) -> GraphQLScalarType:
    """Return a copy of ``scalar`` with corrected literal parsing.

    Serialization, value parsing and metadata are taken over unchanged.
    """
    return GraphQLScalarType(
        name=scalar.name,
        description=scalar.description,
        serialize=scalar.serialize,
        parse_value=scalar.parse_value,
        parse_literal=string_literal_parser(scalar.parse_value, scalar.name),
        specified_by_url=scalar.specified_by_url,
        extensions=scalar.extensions,
        ast_node=scalar.ast_node,
        extension_ast_nodes=scalar.extension_ast_nodes,
    )


__all__ = [
    "DATETIME_SCALAR_NAME",
    "DateTime",
    "fix_datetime_scalar",
    "is_datetime_scalar",
    "string_literal_parser",
]
