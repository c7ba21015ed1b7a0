"""Resolver output normalization.

Every field resolver of a preprocessed schema is wrapped so that

* an unexpected exception raised while resolving becomes a per-field
  :class:`GraphQLError` carrying the formatted traceback in
  ``extensions["trace"]`` instead of escaping as an unhandled fault;
* a returned "typed empty reference" is reported as ``null``: graphql-core's
  ``Undefined`` sentinel, or a weak reference, which is dereferenced so a
  dead one becomes ``None``.

Awaitable results get the same treatment once awaited.
"""

from __future__ import annotations

import logging
import traceback
import weakref
from inspect import isawaitable
from typing import Any, Awaitable, Callable, Optional

from graphql import (
    GraphQLError,
    GraphQLObjectType,
    GraphQLResolveInfo,
    Undefined,
    default_field_resolver,
)

logger = logging.getLogger("schemagate.graph.resolvers")

FieldResolver = Callable[..., Any]
TypeResolver = Callable[..., Any]


def is_empty_reference(value: Any) -> bool:
    """Whether ``value`` stands for an absent value without being ``None``."""
    if value is Undefined:
        return True
    if isinstance(value, weakref.ref):
        return value() is None
    return False


def normalize_result(value: Any) -> Any:
    """Map typed empty references to ``None`` and dereference weak refs."""
    if value is Undefined:
        return None
    if isinstance(value, weakref.ref):
        return value()
    return value


def _fault(exc: Exception, info: GraphQLResolveInfo) -> GraphQLError:
    trace = traceback.format_exc()
    logger.error(
        "Resolver for %s.%s failed: %s",
        info.parent_type.name,
        info.field_name,
        exc,
    )
    logger.debug("Resolver traceback:\n%s", trace)
    return GraphQLError(
        str(exc) or exc.__class__.__name__,
        nodes=info.field_nodes,
        path=info.path.as_list(),
        original_error=exc,
        extensions={"trace": trace},
    )


async def _await_normalized(result: Awaitable[Any], info: GraphQLResolveInfo) -> Any:
    try:
        value = await result
    except GraphQLError:
        raise
    except Exception as exc:  # noqa: BLE001 - reported as a field error
        raise _fault(exc, info) from exc
    return normalize_result(value)


def wrap_resolver(resolve: Optional[FieldResolver]) -> FieldResolver:
    """Wrap a field resolver with fault reporting and result normalization.

    Args:
        resolve: The author's resolver, or None for graphql-core's default
            attribute/key lookup.

    Returns:
        A resolver with the same calling convention.
    """
    target = resolve if resolve is not None else default_field_resolver

    def normalized(source: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        try:
            result = target(source, info, **args)
        except GraphQLError:
            raise
        except Exception as exc:  # noqa: BLE001 - reported as a field error
            raise _fault(exc, info) from exc
        if isawaitable(result):
            return _await_normalized(result, info)
        return normalize_result(result)

    normalized.__wrapped__ = target  # type: ignore[attr-defined]
    return normalized


def _type_name(result: Any) -> Any:
    if isinstance(result, GraphQLObjectType):
        return result.name
    return result


def wrap_resolve_type(resolve_type: Optional[TypeResolver]) -> Optional[TypeResolver]:
    """Let abstract type resolvers keep returning object types.

    graphql-core expects a type name. Rewritten objects keep their names, so
    an object returned by an author's resolver is translated to its name.
    """
    if resolve_type is None:
        return None

    def resolve(value: Any, info: GraphQLResolveInfo, abstract_type: Any) -> Any:
        result = resolve_type(value, info, abstract_type)
        if isawaitable(result):
            async def await_name() -> Any:
                return _type_name(await result)

            return await_name()
        return _type_name(result)

    return resolve


__all__ = [
    "FieldResolver",
    "is_empty_reference",
    "normalize_result",
    "wrap_resolve_type",
    "wrap_resolver",
]
