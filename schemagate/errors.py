"""Exception hierarchy for schemagate.

Preprocessing errors are fatal: they indicate a malformed schema definition
supplied by the host application, so the whole walk is aborted and nothing is
retried. Configuration errors are raised before any walk starts.
"""

from __future__ import annotations


# =============================================================================
# Fatal Preprocessing Errors
# =============================================================================

class PreprocessError(Exception):
    """Base class for errors that abort a preprocessing run."""
    pass


class UnknownTypeNodeError(PreprocessError, TypeError):
    """A node outside the closed set of type node variants reached dispatch.

    Silently skipping such a node would silently drop schema surface, so the
    run fails instead.
    """

    def __init__(self, node: object) -> None:
        self.node = node
        super().__init__(
            f"unknown graphql type {type(node).__module__}.{type(node).__qualname__}: {node!r}"
        )


class SchemaDefinitionError(PreprocessError):
    """A deferred construction error surfaced while reading a schema node.

    Raised when resolving the lazy field, interface or member map of an input
    node fails, and when a root operation type would be excluded.
    """
    pass


class CacheConflictError(PreprocessError):
    """Two different results were committed for the same node identity."""

    def __init__(self, identity: str) -> None:
        self.identity = identity
        super().__init__(f"conflicting results cached for type node {identity!r}")


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ValueError):
    """Preprocessor configuration source is malformed or fails validation."""
    pass


__all__ = [
    "CacheConflictError",
    "ConfigurationError",
    "PreprocessError",
    "SchemaDefinitionError",
    "UnknownTypeNodeError",
]
