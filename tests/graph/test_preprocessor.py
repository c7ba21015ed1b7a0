"""Tests for the recursive schema preprocessor."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInt,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    GraphQLUnionType,
    print_schema,
)

from schemagate.config.schema import PreprocessorConfig
from schemagate.errors import SchemaDefinitionError, UnknownTypeNodeError
from schemagate.graph.nodes import TypeNodeKind, beta, beta_enum, conditional, conditional_enum
from schemagate.graph.preprocessor import Preprocessor, preprocess_schema
from schemagate.graph.schema_config import SchemaConfig

BETA_ON = PreprocessorConfig(beta_features_enabled=True)
BETA_OFF = PreprocessorConfig()


def _never(_config: PreprocessorConfig) -> bool:
    return False


def _always(_config: PreprocessorConfig) -> bool:
    return True


def _plain_schema() -> SchemaConfig:
    """Schema with every composite kind and no conditional markers."""
    node = GraphQLInterfaceType(
        "Node",
        lambda: {"id": GraphQLField(GraphQLNonNull(GraphQLID))},
        resolve_type=lambda value, _info, _type: value["__typename"],
    )
    kind = GraphQLEnumType(
        "Kind",
        {
            "USER": GraphQLEnumValue("user", description="People"),
            "POST": GraphQLEnumValue("post", deprecation_reason="Use USER"),
        },
    )
    user = GraphQLObjectType(
        "User",
        lambda: {
            "id": GraphQLField(GraphQLNonNull(GraphQLID)),
            "name": GraphQLField(GraphQLString, description="Display name"),
            "friends": GraphQLField(
                GraphQLList(GraphQLNonNull(user)),
                args={"first": GraphQLArgument(GraphQLInt, default_value=10)},
            ),
        },
        interfaces=lambda: [node],
    )
    post = GraphQLObjectType(
        "Post",
        lambda: {
            "id": GraphQLField(GraphQLNonNull(GraphQLID)),
            "author": GraphQLField(user),
        },
        interfaces=[node],
    )
    result = GraphQLUnionType(
        "SearchResult",
        [user, post],
        resolve_type=lambda value, _info, _type: value["__typename"],
    )
    user_filter = GraphQLInputObjectType(
        "UserFilter",
        lambda: {
            "name": GraphQLInputField(GraphQLString),
            "kind": GraphQLInputField(kind, default_value="user"),
            "and": GraphQLInputField(GraphQLList(GraphQLNonNull(user_filter))),
        },
    )
    query = GraphQLObjectType(
        "Query",
        lambda: {
            "node": GraphQLField(node, args={"id": GraphQLArgument(GraphQLNonNull(GraphQLID))}),
            "users": GraphQLField(
                GraphQLList(user), args={"filter": GraphQLArgument(user_filter)}
            ),
            "search": GraphQLField(
                GraphQLList(result),
                args={"kind": GraphQLArgument(kind)},
                deprecation_reason="Use node",
            ),
        },
    )
    mutation = GraphQLObjectType(
        "Mutation", lambda: {"rename": GraphQLField(user, args={"name": GraphQLArgument(GraphQLString)})}
    )
    return SchemaConfig(query=query, mutation=mutation, types=[post])


def _gated_schema() -> Dict[str, Any]:
    """Schema whose beta surface sits behind conditional markers."""
    preview = GraphQLObjectType("Preview", lambda: {"title": GraphQLField(GraphQLString)})
    color = GraphQLEnumType(
        "Color",
        {
            "A": GraphQLEnumValue("a"),
            "B": beta_enum(GraphQLEnumValue("b", description="Beta color")),
            "C": conditional_enum("c", _never),
        },
    )
    item = GraphQLObjectType(
        "Item",
        lambda: {
            "name": GraphQLField(GraphQLString),
            "preview": GraphQLField(beta(preview)),
            "previews": GraphQLField(GraphQLList(GraphQLNonNull(beta(preview)))),
            "color": GraphQLField(color),
        },
    )
    query = GraphQLObjectType(
        "Query",
        lambda: {
            "items": GraphQLField(
                GraphQLList(item),
                args={
                    "limit": GraphQLArgument(GraphQLInt),
                    "previewOnly": GraphQLArgument(beta(GraphQLBoolean)),
                },
            ),
            "preview": GraphQLField(beta(preview)),
        },
    )
    return {
        "schema": SchemaConfig(query=query, types=[beta(preview), item]),
        "preview": preview,
        "item": item,
        "color": color,
    }


def _field_names(type_: Any) -> List[str]:
    return list(type_.fields)


def _cause_chain(exc: BaseException) -> List[BaseException]:
    chain = []
    current = exc
    while current is not None:
        chain.append(current)
        current = current.__cause__
    return chain


def test_schema_without_conditionals_is_unchanged() -> None:
    """Without markers the rewritten schema prints identically."""
    original = _plain_schema()

    result = preprocess_schema(original, BETA_OFF)

    assert print_schema(result.to_schema()) == print_schema(original.to_schema())


def test_rewrite_builds_new_nodes_and_keeps_members() -> None:
    original = _plain_schema()

    result = preprocess_schema(original, BETA_OFF)

    assert result.query is not original.query
    assert result.subscription is None
    users = result.query.fields["users"]
    user = users.type.of_type
    assert user is not original.query.fields["users"].type.of_type
    assert _field_names(user) == ["id", "name", "friends"]
    assert [iface.name for iface in user.interfaces] == ["Node"]
    assert list(user.fields["friends"].args) == ["first"]
    assert user.fields["friends"].args["first"].default_value == 10
    assert user.fields["name"].description == "Display name"
    assert result.query.fields["search"].deprecation_reason == "Use node"

    union = result.query.fields["search"].type.of_type
    assert [member.name for member in union.types] == ["User", "Post"]
    assert union.types[0] is user

    kind = result.query.fields["search"].args["kind"].type
    assert list(kind.values) == ["USER", "POST"]
    assert kind.values["USER"].value == "user"
    assert kind.values["USER"].description == "People"
    assert kind.values["POST"].deprecation_reason == "Use USER"


def test_disabled_conditional_field_is_absent() -> None:
    gated = _gated_schema()

    result = preprocess_schema(gated["schema"], BETA_OFF)

    assert "preview" not in result.query.fields
    item = result.query.fields["items"].type.of_type
    assert _field_names(item) == ["name", "color"]
    assert "Preview" not in result.to_schema().type_map


def test_enabled_conditional_field_uses_rewritten_inner_type() -> None:
    gated = _gated_schema()

    result = preprocess_schema(gated["schema"], BETA_ON)

    preview = result.query.fields["preview"].type
    assert preview.name == "Preview"
    assert preview is not gated["preview"]
    item = result.query.fields["items"].type.of_type
    assert _field_names(item) == ["name", "preview", "previews", "color"]
    assert item.fields["preview"].type is preview
    assert item.fields["previews"].type.of_type.of_type is preview


def test_disabled_conditional_does_not_visit_inner_type() -> None:
    visited = []

    def fields() -> Dict[str, GraphQLField]:
        visited.append("Hidden")
        return {"x": GraphQLField(GraphQLString)}

    hidden = GraphQLObjectType("Hidden", fields)
    query = GraphQLObjectType("Query", {"hidden": GraphQLField(conditional(hidden, _never))})

    result = preprocess_schema(SchemaConfig(query=query), BETA_OFF)
    result.to_schema()

    assert visited == []
    assert dict(result.query.fields) == {}


def test_argument_exclusion_keeps_field() -> None:
    gated = _gated_schema()

    result = preprocess_schema(gated["schema"], BETA_OFF)

    items = result.query.fields["items"]
    assert list(items.args) == ["limit"]
    assert items.args["limit"].type is GraphQLInt

    enabled = preprocess_schema(gated["schema"], BETA_ON)
    assert list(enabled.query.fields["items"].args) == ["limit", "previewOnly"]


def test_enum_values_filtered_by_predicate() -> None:
    gated = _gated_schema()

    result = preprocess_schema(gated["schema"], BETA_ON)

    color = result.query.fields["items"].type.of_type.fields["color"].type
    assert set(color.values) == {"A", "B"}
    assert color.values["A"].value == "a"
    assert color.values["B"].value == "b"
    assert color.values["B"].description == "Beta color"

    production = preprocess_schema(gated["schema"], BETA_OFF)
    color = production.query.fields["items"].type.of_type.fields["color"].type
    assert set(color.values) == {"A"}


def test_excluded_auxiliary_types_are_dropped() -> None:
    gated = _gated_schema()

    production = preprocess_schema(gated["schema"], BETA_OFF)
    enabled = preprocess_schema(gated["schema"], BETA_ON)

    assert [t.name for t in production.types] == ["Item"]
    assert [t.name for t in enabled.types] == ["Preview", "Item"]
    assert None not in production.types


def test_direct_self_reference_terminates_with_same_node() -> None:
    node = GraphQLObjectType(
        "Node",
        lambda: {
            "parent": GraphQLField(node),
            "children": GraphQLField(GraphQLNonNull(GraphQLList(GraphQLNonNull(node)))),
        },
    )

    result = preprocess_schema(SchemaConfig(query=node), BETA_OFF)

    rewritten = result.query
    assert rewritten.fields["parent"].type is rewritten
    assert rewritten.fields["children"].type.of_type.of_type.of_type is rewritten
    result.to_schema()


def test_indirect_cycle_resolves_to_single_copy() -> None:
    result = preprocess_schema(_plain_schema(), BETA_OFF)

    user = result.query.fields["users"].type.of_type
    post = result.types[0]
    assert post.fields["author"].type is user
    assert user.fields["friends"].type.of_type.of_type is user
    user_filter = result.query.fields["users"].args["filter"].type
    assert user_filter.fields["and"].type.of_type.of_type is user_filter


def test_lazy_field_map_is_stable() -> None:
    result = preprocess_schema(_gated_schema()["schema"], BETA_ON)

    first = result.query.fields
    second = result.query.fields

    assert list(first) == list(second)
    for name in first:
        assert first[name] is second[name]


def test_member_maps_are_not_forced_by_preprocessing() -> None:
    calls = []

    def fields() -> Dict[str, GraphQLField]:
        calls.append("fields")
        return {"x": GraphQLField(GraphQLString)}

    query = GraphQLObjectType("Query", fields)

    result = preprocess_schema(SchemaConfig(query=query), BETA_OFF)
    assert calls == []

    assert list(result.query.fields) == ["x"]
    assert calls == ["fields"]


def test_interface_behind_disabled_conditional_is_omitted() -> None:
    named = GraphQLInterfaceType("Named", lambda: {"name": GraphQLField(GraphQLString)})
    thing = GraphQLObjectType(
        "Thing",
        lambda: {"name": GraphQLField(GraphQLString)},
        interfaces=lambda: [beta(named)],
    )
    schema = SchemaConfig(query=GraphQLObjectType("Query", {"thing": GraphQLField(thing)}))

    production = preprocess_schema(schema, BETA_OFF)
    enabled = preprocess_schema(schema, BETA_ON)

    assert list(production.query.fields["thing"].type.interfaces) == []
    assert [i.name for i in enabled.query.fields["thing"].type.interfaces] == ["Named"]
    assert "Named" not in production.to_schema().type_map
    assert "Named" in enabled.to_schema().type_map


def test_union_member_behind_disabled_conditional_is_omitted() -> None:
    article = GraphQLObjectType("Article", lambda: {"title": GraphQLField(GraphQLString)})
    video = GraphQLObjectType("Video", lambda: {"url": GraphQLField(GraphQLString)})
    feed_entry = GraphQLUnionType("FeedEntry", lambda: [article, beta(video)])
    query = GraphQLObjectType("Query", {"feed": GraphQLField(GraphQLList(feed_entry))})
    schema = SchemaConfig(query=query)

    production = preprocess_schema(schema, BETA_OFF)
    enabled = preprocess_schema(schema, BETA_ON)

    production_union = production.query.fields["feed"].type.of_type
    enabled_union = enabled.query.fields["feed"].type.of_type
    assert [member.name for member in production_union.types] == ["Article"]
    assert [member.name for member in enabled_union.types] == ["Article", "Video"]
    assert "Video" not in production.to_schema().type_map
    assert "Video" in enabled.to_schema().type_map


def test_failing_interface_list_is_reported() -> None:
    def broken_interfaces() -> List[GraphQLInterfaceType]:
        raise ValueError("interface list authored incorrectly")

    thing = GraphQLObjectType(
        "Thing", {"name": GraphQLField(GraphQLString)}, interfaces=broken_interfaces
    )
    query = GraphQLObjectType("Query", {"thing": GraphQLField(thing)})

    result = preprocess_schema(SchemaConfig(query=query), BETA_OFF)

    with pytest.raises(Exception) as excinfo:
        result.query.fields["thing"].type.interfaces
    chain = _cause_chain(excinfo.value)
    assert any(isinstance(exc, SchemaDefinitionError) for exc in chain)
    assert "interface list authored incorrectly" in str(excinfo.value)


def test_input_field_behind_disabled_conditional_is_dropped() -> None:
    filters = GraphQLInputObjectType(
        "Filters",
        {
            "text": GraphQLInputField(GraphQLString),
            "fuzzy": GraphQLInputField(beta(GraphQLBoolean), default_value=False),
        },
    )
    query = GraphQLObjectType(
        "Query", {"find": GraphQLField(GraphQLString, args={"filters": GraphQLArgument(filters)})}
    )

    result = preprocess_schema(SchemaConfig(query=query), BETA_OFF)

    assert list(result.query.fields["find"].args["filters"].type.fields) == ["text"]


def test_shared_type_is_rewritten_once() -> None:
    shared = GraphQLObjectType("Shared", lambda: {"x": GraphQLField(GraphQLString)})
    query = GraphQLObjectType(
        "Query",
        lambda: {
            "a": GraphQLField(shared),
            "b": GraphQLField(GraphQLNonNull(shared)),
            "c": GraphQLField(conditional(shared, _always)),
        },
    )
    preprocessor = Preprocessor(BETA_OFF)

    result = preprocessor.process_schema(SchemaConfig(query=query, types=[shared]))

    fields = result.query.fields
    assert fields["a"].type is fields["b"].type.of_type
    assert fields["c"].type is fields["a"].type
    assert result.types[0] is fields["a"].type
    assert preprocessor.stats()["excluded"] == 0


def test_runs_do_not_share_results() -> None:
    schema = _plain_schema()

    first = preprocess_schema(schema, BETA_OFF)
    second = preprocess_schema(schema, BETA_OFF)

    assert first.query is not second.query
    assert first.types[0] is not second.types[0]


def test_input_graph_is_not_mutated() -> None:
    gated = _gated_schema()
    schema = gated["schema"]
    item_fields = dict(gated["item"].fields)
    color_values = dict(gated["color"].values)

    result = preprocess_schema(schema, BETA_OFF)
    result.to_schema()

    assert dict(gated["item"].fields) == item_fields
    assert gated["item"].fields["preview"].type.of_type is gated["preview"]
    assert dict(gated["color"].values) == color_values
    assert len(schema.types) == 2


def test_absent_roots_stay_absent() -> None:
    result = preprocess_schema(_gated_schema()["schema"], BETA_OFF)

    assert result.mutation is None
    assert result.subscription is None


def test_excluded_root_is_fatal() -> None:
    query = GraphQLObjectType("Query", {"x": GraphQLField(GraphQLString)})

    with pytest.raises(SchemaDefinitionError):
        preprocess_schema(SchemaConfig(query=beta(query)), BETA_OFF)  # type: ignore[arg-type]


def test_unknown_node_is_fatal() -> None:
    query = GraphQLObjectType("Query", {"x": GraphQLField(GraphQLString)})

    with pytest.raises(UnknownTypeNodeError, match="unknown graphql type"):
        preprocess_schema(SchemaConfig(query=query, types=["NotAType"]), BETA_OFF)

    with pytest.raises(UnknownTypeNodeError):
        Preprocessor(BETA_OFF).process_type(object())


def test_deferred_construction_error_aborts() -> None:
    def broken_fields() -> Dict[str, GraphQLField]:
        raise ValueError("field map authored incorrectly")

    query = GraphQLObjectType("Query", broken_fields)

    result = preprocess_schema(SchemaConfig(query=query), BETA_OFF)

    with pytest.raises(Exception) as excinfo:
        result.query.fields
    chain = _cause_chain(excinfo.value)
    assert any(isinstance(exc, SchemaDefinitionError) for exc in chain)
    assert "field map authored incorrectly" in str(excinfo.value)


def test_custom_directive_arguments_are_filtered() -> None:
    cached = GraphQLDirective(
        "cached",
        locations=[DirectiveLocation.FIELD_DEFINITION],
        args={
            "ttl": GraphQLArgument(GraphQLInt),
            "scope": GraphQLArgument(beta(GraphQLString)),
        },
    )
    query = GraphQLObjectType("Query", {"x": GraphQLField(GraphQLString)})
    schema = SchemaConfig.from_schema(GraphQLSchema(query=query, directives=[cached]))

    result = preprocess_schema(schema, BETA_OFF)

    rewritten = [d for d in result.directives if d.name == "cached"]
    assert len(rewritten) == 1
    assert list(rewritten[0].args) == ["ttl"]


def test_visit_counts_reported_in_stats() -> None:
    preprocessor = Preprocessor(BETA_OFF)

    preprocessor.process_schema(_gated_schema()["schema"])

    stats = preprocessor.stats()
    assert stats["excluded"] >= 1
    assert stats["visited"] > stats["excluded"]


def test_every_node_kind_has_a_handler() -> None:
    preprocessor = Preprocessor(BETA_OFF)

    assert set(preprocessor._handlers) == set(TypeNodeKind)
