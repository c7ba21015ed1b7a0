"""Public graph API surface."""

from schemagate.graph.cache import VisitCache
from schemagate.graph.nodes import (
    BETA_SUFFIX,
    Conditional,
    ConditionalEnumValue,
    TypeNodeKind,
    beta,
    beta_enum,
    classify,
    conditional,
    conditional_enum,
    node_identity,
)
from schemagate.graph.preprocessor import Preprocessor, preprocess_schema
from schemagate.graph.resolvers import is_empty_reference, wrap_resolver
from schemagate.graph.scalars import DateTime, fix_datetime_scalar
from schemagate.graph.schema_config import SchemaConfig

__all__ = [
    "BETA_SUFFIX",
    "Conditional",
    "ConditionalEnumValue",
    "DateTime",
    "Preprocessor",
    "SchemaConfig",
    "TypeNodeKind",
    "VisitCache",
    "beta",
    "beta_enum",
    "classify",
    "conditional",
    "conditional_enum",
    "fix_datetime_scalar",
    "is_empty_reference",
    "node_identity",
    "preprocess_schema",
    "wrap_resolver",
]
