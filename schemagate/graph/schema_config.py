"""Schema descriptor consumed and produced by the preprocessor.

A :class:`SchemaConfig` holds what is needed to build a
:class:`graphql.GraphQLSchema` without building it yet: up to three root
object types, auxiliary types that are not reachable from the roots, and
directives. Input descriptors may contain conditional markers; descriptors
returned by :func:`preprocess_schema` never do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from graphql import (
    GraphQLDirective,
    GraphQLObjectType,
    GraphQLSchema,
    is_introspection_type,
    is_specified_scalar_type,
)


@dataclass
class SchemaConfig:
    """Roots, auxiliary types and directives of a schema.

    Attributes:
        query: Query root object type, if any.
        mutation: Mutation root object type, if any.
        subscription: Subscription root object type, if any.
        types: Additional named types to include in the schema.
        directives: Directives; None means graphql-core's specified set.
        description: Schema description.
    """

    query: Optional[GraphQLObjectType] = None
    mutation: Optional[GraphQLObjectType] = None
    subscription: Optional[GraphQLObjectType] = None
    types: List[Any] = field(default_factory=list)
    directives: Optional[List[GraphQLDirective]] = None
    description: Optional[str] = None

    def roots(self) -> List[GraphQLObjectType]:
        """Present root operation types, in query/mutation/subscription order."""
        return [root for root in (self.query, self.mutation, self.subscription) if root is not None]

    def to_schema(self) -> GraphQLSchema:
        """Build the executable schema.

        This forces every lazy member map reachable from the descriptor.
        """
        return GraphQLSchema(
            query=self.query,
            mutation=self.mutation,
            subscription=self.subscription,
            types=list(self.types) or None,
            directives=self.directives,
            description=self.description,
        )

    @classmethod
    def from_schema(cls, schema: GraphQLSchema) -> "SchemaConfig":
        """Describe an existing schema.

        Introspection types and specified scalars are left out of ``types``;
        graphql-core adds them back when the schema is rebuilt.
        """
        root_names = {
            root.name
            for root in (schema.query_type, schema.mutation_type, schema.subscription_type)
            if root is not None
        }
        types = [
            named
            for name, named in schema.type_map.items()
            if name not in root_names
            and not is_introspection_type(named)
            and not is_specified_scalar_type(named)
        ]
        return cls(
            query=schema.query_type,
            mutation=schema.mutation_type,
            subscription=schema.subscription_type,
            types=types,
            directives=list(schema.directives),
            description=schema.description,
        )


__all__ = ["SchemaConfig"]
