"""Report which schema surface a preprocessing run removed.

Both the input and the preprocessed descriptor are turned into a type
reference graph (one node per named type, one edge per field, argument, input
field, implemented interface or union member) and compared. Reachability from
the root operation types is computed on the preprocessed graph to find types
that survive only through the auxiliary type list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Set, Tuple

import networkx as nx
from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLUnionType,
)

from schemagate.graph.nodes import classify, declared_members, is_gated, unwrap_named
from schemagate.graph.schema_config import SchemaConfig

logger = logging.getLogger("schemagate.analysis.exclusion")

FIELD = "field"
ARGUMENT = "argument"
INPUT_FIELD = "input_field"
IMPLEMENTS = "implements"
MEMBER = "member"


def _references(named: Any) -> Iterator[Tuple[Any, Dict[str, Any]]]:
    """Yield ``(referenced type node, edge attributes)`` for a named type."""
    if isinstance(named, (GraphQLObjectType, GraphQLInterfaceType)):
        for field_name, fld in named.fields.items():
            via = f"{named.name}.{field_name}"
            yield fld.type, {"kind": FIELD, "via": via}
            for arg_name, arg in fld.args.items():
                yield arg.type, {"kind": ARGUMENT, "via": f"{via}({arg_name})"}
        for iface in declared_members(named, "interfaces"):
            yield iface, {"kind": IMPLEMENTS, "via": named.name}
    elif isinstance(named, GraphQLUnionType):
        for member in declared_members(named, "types"):
            yield member, {"kind": MEMBER, "via": named.name}
    elif isinstance(named, GraphQLInputObjectType):
        for field_name, fld in named.fields.items():
            yield fld.type, {"kind": INPUT_FIELD, "via": f"{named.name}.{field_name}"}


def build_type_graph(schema: SchemaConfig) -> nx.MultiDiGraph:
    """Build the type reference graph of ``schema``.

    Conditional markers are looked through; edges that pass one carry
    ``gated=True``.

    Args:
        schema: Input or preprocessed descriptor.

    Returns:
        nx.MultiDiGraph keyed by type name. The graph attribute ``roots`` lists
        the root operation type names.
    """
    graph = nx.MultiDiGraph(roots=[root.name for root in schema.roots()])
    stack: List[Any] = [unwrap_named(node) for node in schema.roots()]
    stack.extend(unwrap_named(node) for node in schema.types)
    for directive in schema.directives or ():
        stack.extend(unwrap_named(arg.type) for arg in directive.args.values())

    seen: Set[str] = set()
    while stack:
        named = stack.pop()
        if named.name in seen:
            continue
        seen.add(named.name)

        attrs: Dict[str, Any] = {"kind": classify(named).value}
        if isinstance(named, GraphQLEnumType):
            attrs["values"] = sorted(named.values)
        graph.add_node(named.name, **attrs)

        for target, edge_attrs in _references(named):
            target_named = unwrap_named(target)
            graph.add_edge(named.name, target_named.name, gated=is_gated(target), **edge_attrs)
            if target_named.name not in seen:
                stack.append(target_named)

    logger.debug(
        "Built type graph: %d types, %d references",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


@dataclass
class ExclusionReport:
    """Schema surface removed by preprocessing.

    Attributes:
        removed_types: Named types absent from the preprocessed schema.
        removed_fields: ``Type.field`` entries (output and input fields) whose
            owner survived but the field did not.
        removed_arguments: ``Type.field(arg)`` entries dropped from surviving
            fields.
        removed_enum_values: ``Enum.VALUE`` entries dropped from surviving
            enums.
        unreachable_types: Types of the preprocessed schema that no root
            operation type reaches.
    """

    removed_types: List[str] = field(default_factory=list)
    removed_fields: List[str] = field(default_factory=list)
    removed_arguments: List[str] = field(default_factory=list)
    removed_enum_values: List[str] = field(default_factory=list)
    unreachable_types: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.removed_types
            or self.removed_fields
            or self.removed_arguments
            or self.removed_enum_values
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "removed_types": list(self.removed_types),
            "removed_fields": list(self.removed_fields),
            "removed_arguments": list(self.removed_arguments),
            "removed_enum_values": list(self.removed_enum_values),
            "unreachable_types": list(self.unreachable_types),
        }


def _members(graph: nx.MultiDiGraph, *kinds: str) -> Set[str]:
    return {
        data["via"]
        for _src, _dst, data in graph.edges(data=True)
        if data.get("kind") in kinds
    }


def _owner(via: str) -> str:
    return via.split(".", 1)[0]


class ExclusionAnalyzer:
    """Compare an input descriptor with its preprocessed counterpart."""

    def __init__(self, original: SchemaConfig, preprocessed: SchemaConfig) -> None:
        """Initialize exclusion analyzer.

        Args:
            original: Descriptor passed to ``preprocess_schema``.
            preprocessed: Descriptor it returned.
        """
        self.original = original
        self.preprocessed = preprocessed

    def analyze(self) -> ExclusionReport:
        """Perform the comparison.

        Returns:
            ExclusionReport: Sorted lists of removed and unreachable surface.
        """
        before = build_type_graph(self.original)
        after = build_type_graph(self.preprocessed)
        surviving = set(after.nodes)

        removed_types = sorted(set(before.nodes) - surviving)

        removed_fields = sorted(
            via
            for via in _members(before, FIELD, INPUT_FIELD) - _members(after, FIELD, INPUT_FIELD)
            if _owner(via) in surviving
        )
        removed_arguments = sorted(
            via
            for via in _members(before, ARGUMENT) - _members(after, ARGUMENT)
            if _owner(via) in surviving and via.split("(", 1)[0] not in removed_fields
        )

        removed_enum_values: List[str] = []
        for name, attrs in before.nodes(data=True):
            if "values" not in attrs or name not in surviving:
                continue
            kept = set(after.nodes[name].get("values", ()))
            removed_enum_values.extend(
                f"{name}.{value}" for value in attrs["values"] if value not in kept
            )

        reachable: Set[str] = set()
        for root in after.graph.get("roots", []):
            reachable.add(root)
            reachable.update(nx.descendants(after, root))
        unreachable_types = sorted(surviving - reachable)

        report = ExclusionReport(
            removed_types=removed_types,
            removed_fields=removed_fields,
            removed_arguments=removed_arguments,
            removed_enum_values=sorted(removed_enum_values),
            unreachable_types=unreachable_types,
        )
        logger.info(
            "Exclusion analysis: %d types, %d fields, %d arguments, %d enum values removed",
            len(report.removed_types),
            len(report.removed_fields),
            len(report.removed_arguments),
            len(report.removed_enum_values),
        )
        return report


__all__ = ["ExclusionAnalyzer", "ExclusionReport", "build_type_graph"]
