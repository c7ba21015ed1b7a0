"""schemagate - feature-gated GraphQL schema preprocessing.

Schema authors wrap beta surface with :func:`beta` / :func:`beta_enum`;
:func:`preprocess_schema` resolves those markers against a
:class:`PreprocessorConfig` and returns a schema descriptor with the gated
types, and everything that depends on them, removed.
"""

from schemagate.config import PreprocessorConfig, config_from_env, load_preprocessor_config
from schemagate.errors import (
    ConfigurationError,
    PreprocessError,
    SchemaDefinitionError,
    UnknownTypeNodeError,
)
from schemagate.graph import (
    Conditional,
    DateTime,
    SchemaConfig,
    beta,
    beta_enum,
    conditional,
    conditional_enum,
    preprocess_schema,
)

__version__ = "0.1.0"

__all__ = [
    "Conditional",
    "ConfigurationError",
    "DateTime",
    "PreprocessError",
    "PreprocessorConfig",
    "SchemaConfig",
    "SchemaDefinitionError",
    "UnknownTypeNodeError",
    "beta",
    "beta_enum",
    "conditional",
    "conditional_enum",
    "config_from_env",
    "load_preprocessor_config",
    "preprocess_schema",
]
