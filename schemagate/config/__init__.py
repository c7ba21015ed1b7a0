"""Configuration schema and loading for schemagate."""

from .loader import config_from_env, load_preprocessor_config
from .schema import PreprocessorConfig

__all__ = [
    "PreprocessorConfig",
    "config_from_env",
    "load_preprocessor_config",
]
