"""Per-run memoization cache for the schema preprocessor.

Each preprocessing run owns exactly one :class:`VisitCache`. It maps a node's
identity string to the rewritten node, or to ``None`` when the node was
excluded, so every node is transformed at most once and re-entrant visits
through cyclic field references observe the committed answer instead of
recursing again.

Composite nodes are committed as soon as they are constructed. Their members
are thunks that only visit children when forced, so by the time a child can
reach its container again the container's slot is already filled.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from graphql import GraphQLType

from schemagate.errors import CacheConflictError
from schemagate.graph.nodes import node_identity

logger = logging.getLogger("schemagate.graph.cache")


class VisitCache:
    """Identity-string keyed store of preprocessing results.

    Not shared between runs and not thread-safe; a single depth-first walk
    is the only user.
    """

    def __init__(self) -> None:
        self._results: Dict[str, Optional[GraphQLType]] = {}

    def get(self, node: Any) -> Tuple[Optional[GraphQLType], bool]:
        """Look up the result for ``node``.

        Returns:
            ``(result, found)``. ``result`` is ``None`` both when the node was
            excluded (``found`` is True) and when it was never visited.
        """
        key = node_identity(node)
        if key in self._results:
            return self._results[key], True
        return None, False

    def put(self, node: Any, result: Optional[GraphQLType]) -> None:
        """Commit ``result`` (``None`` for excluded) for ``node``.

        Committing the same result twice is a no-op.

        Raises:
            CacheConflictError: If a different result is already stored.
        """
        key = node_identity(node)
        if key in self._results:
            if self._results[key] is not result:
                raise CacheConflictError(key)
            return
        self._results[key] = result
        if result is None:
            logger.debug("Excluded type node %s", key)

    def excluded(self) -> List[str]:
        """Identities that resolved to exclusion, in visit order."""
        return [key for key, result in self._results.items() if result is None]

    def __contains__(self, node: Any) -> bool:
        return node_identity(node) in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)


__all__ = ["VisitCache"]
