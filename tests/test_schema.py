from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytest

from graphogm.model import (
    BaseNode,
    BaseUUIDNode,
    Direction,
    OgmError,
    RelationConfig,
    RelationType,
    ValidationError,
)
from graphogm.pk import DEFAULT_PRIMARY_KEY_STRATEGY, UUID_PRIMARY_KEY_STRATEGY
from graphogm.schema import (
    Edge,
    FieldConfig,
    RelationConfigs,
    Schema,
    StructConfig,
    get_type_name,
    handle_node_state,
    to_cypher_params,
    traverse_rel_type,
)


class TdString(str):
    pass


class TdInt(int):
    pass


class TdArr(list):
    pass


class TdArrOfTd(list):
    pass


@dataclass(eq=False)
class a(BaseUUIDNode):  # noqa: N801
    test_field: str = ""
    test_type_def_string: TdString = TdString("")
    test_type_def_int: TdInt = TdInt(0)
    prop_test0: dict[str, Any] | None = None
    prop_test1: dict[str, str] | None = None
    props_test2: list[str] | None = None
    props_test3: list[int] | None = None
    created: datetime = datetime.min
    many_a: list[Any] | None = None
    single_spec_a: Any = None


@dataclass(eq=False)
class b(BaseUUIDNode):  # noqa: N801
    test_field: str = ""
    many_b: Any = None
    single_spec: Any = None


@dataclass(eq=False)
class c(BaseUUIDNode, Edge):  # noqa: N801
    start: Any = None
    end: Any = None
    test: str = ""

    def get_start_node(self):
        return self.start

    def get_end_node(self):
        return self.end

    def set_start_node(self, node):
        self.start = node

    def set_end_node(self, node):
        self.end = node

    @classmethod
    def get_start_node_type(cls):
        return a

    @classmethod
    def get_end_node_type(cls):
        return b


@dataclass(eq=False)
class BrokenEdge(BaseNode, Edge):
    def get_start_node(self):
        return None

    def get_end_node(self):
        return None

    def set_start_node(self, node):
        pass

    def set_end_node(self, node):
        pass

    @classmethod
    def get_start_node_type(cls):
        return None

    @classmethod
    def get_end_node_type(cls):
        return None


@dataclass(eq=False)
class PropsTest:
    id: int | None = None
    uuid: str = ""
    prop_test0: dict[str, Any] | None = None
    prop_test1: dict[str, str] | None = None
    props_test2: list[str] | None = None
    props_test3: list[int] | None = None
    props_test4: TdArr | None = None
    props_test5: TdArrOfTd | None = None
    load_map: dict[str, RelationConfig] = field(default_factory=dict)


def _base_fields(parent):
    return [
        FieldConfig("id", name="id", type=int, primary_key="default", parent_type=parent),
        FieldConfig("load_map", name="load_map", type=dict, ignore=True, parent_type=parent),
        FieldConfig("uuid", name="uuid", type=str, primary_key="UUID", parent_type=parent),
    ]


def a_config():
    return StructConfig(
        label="a",
        node_type=a,
        fields=_base_fields(a)
        + [
            FieldConfig("test_field", name="test_field", type=str),
            FieldConfig(
                "test_type_def_string",
                name="test_type_def_string",
                type=TdString,
                is_typedef=True,
                typedef_actual=str,
            ),
            FieldConfig(
                "test_type_def_int",
                name="test_type_def_int",
                type=TdInt,
                is_typedef=True,
                typedef_actual=int,
            ),
            FieldConfig("prop_test0", name="props0", type=dict, properties=True),
            FieldConfig("prop_test1", name="props1", type=dict, properties=True),
            FieldConfig("props_test2", name="props2", type=list, properties=True),
            FieldConfig("props_test3", name="props3", type=list, properties=True),
            FieldConfig("created", name="created", type=datetime),
            FieldConfig(
                "many_a",
                type=b,
                relationship="testm2o",
                direction=Direction.OUTGOING,
                many_relationship=True,
                parent_type=a,
            ),
            FieldConfig(
                "single_spec_a",
                type=c,
                relationship="special_single",
                direction=Direction.OUTGOING,
                parent_type=a,
            ),
        ],
    )


def b_config():
    return StructConfig(
        label="b",
        node_type=b,
        fields=_base_fields(b)
        + [
            FieldConfig("test_field", name="test_field", type=str),
            FieldConfig(
                "many_b",
                type=a,
                relationship="testm2o",
                direction=Direction.INCOMING,
                parent_type=b,
            ),
            FieldConfig(
                "single_spec",
                type=c,
                relationship="special_single",
                direction=Direction.INCOMING,
                parent_type=b,
            ),
        ],
    )


def props_config():
    return StructConfig(
        label="PropsTest",
        node_type=PropsTest,
        fields=[
            FieldConfig("id", name="id", type=int, primary_key="default"),
            FieldConfig("uuid", name="uuid", type=str, primary_key="UUID"),
            FieldConfig("prop_test0", name="props0", type=dict, properties=True),
            FieldConfig("prop_test1", name="props1", type=dict, properties=True),
            FieldConfig("props_test2", name="props2", type=list, properties=True),
            FieldConfig("props_test3", name="props3", type=list, properties=True),
            FieldConfig("props_test4", name="props4", type=TdArr, properties=True),
            FieldConfig("props_test5", name="props5", type=TdArrOfTd, properties=True),
        ],
    )


@pytest.fixture
def schema():
    s = Schema(UUID_PRIMARY_KEY_STRATEGY)
    s.register(a_config())
    s.register(b_config())
    s.register(props_config())
    return s


def test_handle_node_state_requires_values():
    with pytest.raises(OgmError):
        handle_node_state(None, None)
    with pytest.raises(OgmError):
        handle_node_state(None, a())


def test_handle_node_state_generates_uuid_for_new_node():
    val = a()
    is_new, ident, load_map = handle_node_state(UUID_PRIMARY_KEY_STRATEGY, val)
    assert is_new is True
    assert ident == -1
    assert load_map is None
    assert len(val.uuid) == 36


def test_handle_node_state_cases():
    val = a()
    val.uuid = "dasdfasd"
    is_new, _, _ = handle_node_state(UUID_PRIMARY_KEY_STRATEGY, val)
    assert is_new is True
    assert val.uuid == "dasdfasd"

    val.load_map = {}
    is_new, _, _ = handle_node_state(UUID_PRIMARY_KEY_STRATEGY, val)
    assert is_new is True

    val.id = 10
    val.load_map = {
        "dasdfasd": RelationConfig(ids=[69], relation_type=RelationType.SINGLE)
    }
    is_new, ident, load_map = handle_node_state(UUID_PRIMARY_KEY_STRATEGY, val)
    assert is_new is False
    assert ident == 10
    assert load_map == val.load_map


def test_handle_node_state_default_strategy():
    val = a(id=7)
    assert handle_node_state(DEFAULT_PRIMARY_KEY_STRATEGY, val) == (False, 7, None)
    fresh = a()
    assert handle_node_state(DEFAULT_PRIMARY_KEY_STRATEGY, fresh) == (True, 0, None)
    assert fresh.uuid == ""


def test_get_type_name():
    assert get_type_name(a) == "a"
    assert get_type_name(a()) == "a"
    assert get_type_name(list[a]) == "a"
    assert get_type_name([b()]) == "b"


def test_get_type_name_rejects_primitives():
    with pytest.raises(OgmError):
        get_type_name(int)
    with pytest.raises(OgmError):
        get_type_name([])


def test_to_cypher_params_node(schema):
    val = a(uuid="testuuid", id=0, test_field="testvalue")
    params = to_cypher_params(schema, val, schema.get("a"))
    assert params == {
        "uuid": "testuuid",
        "test_type_def_int": 0,
        "test_type_def_string": "",
        "test_field": "testvalue",
        "props2": None,
        "props3": None,
        "created": datetime.min,
    }
    assert type(params["test_type_def_int"]) is int
    assert type(params["test_type_def_string"]) is str


def test_to_cypher_params_properties(schema):
    p = PropsTest(id=1, uuid="testuuid", prop_test0={"test": "testvalue"})
    params = to_cypher_params(schema, p, schema.get("PropsTest"))
    assert params == {
        "uuid": "testuuid",
        "props0.test": "testvalue",
        "props2": None,
        "props3": None,
        "props4": None,
        "props5": None,
    }


def test_to_cypher_params_bad_properties(schema):
    config = StructConfig(
        label="x", fields=[FieldConfig("test_field", name="p", type=str, properties=True)]
    )
    with pytest.raises(OgmError):
        to_cypher_params(schema, a(), config)


def test_traverse_rel_type():
    assert traverse_rel_type(b, Direction.OUTGOING) == "b"
    assert traverse_rel_type(c, Direction.OUTGOING) == "b"
    assert traverse_rel_type(c, Direction.INCOMING) == "a"
    with pytest.raises(OgmError):
        traverse_rel_type(BrokenEdge, Direction.OUTGOING)


def test_schema_get_and_relationships(schema):
    assert schema.get("a").node_type is a
    rels = schema.relationships_for_label("a")
    assert [r.field_name for r in rels] == ["many_a", "single_spec_a"]
    assert "b" in schema
    with pytest.raises(OgmError, match="nonexisting"):
        schema.get("nonexisting")


def test_schema_registers_relations(schema):
    start, end = schema.relations.get_configs("a", "b", "b", "a", "testm2o")
    assert start.field_name == "many_a"
    assert end.field_name == "many_b"
    schema.relations.validate()


def test_relation_configs_empty_and_missing():
    rc = RelationConfigs()
    with pytest.raises(OgmError, match="no configs provided"):
        rc.get_configs("a", "b", "b", "a", "rel")
    rc.add("a", "rel", "b", FieldConfig("f", direction=Direction.OUTGOING))
    with pytest.raises(OgmError, match="no configs for key"):
        rc.get_configs("a", "b", "b", "a", "rel")
    with pytest.raises(OgmError, match="field type"):
        rc.get_configs("a", "zzz", "b", "a", "rel")


def test_relation_configs_picks_direction():
    rc = RelationConfigs()
    out_conf = FieldConfig("out", direction=Direction.OUTGOING)
    in_conf = FieldConfig("in", direction=Direction.INCOMING)
    rc.add("n", "rel", "n", out_conf)
    rc.add("n", "rel", "n", in_conf)
    start, end = rc.get_configs("n", "n", "n", "n", "rel")
    assert start is out_conf
    assert end is in_conf


def test_relation_configs_validate_unbalanced():
    rc = RelationConfigs()
    rc.add("a", "rel", "b", FieldConfig("f", direction=Direction.OUTGOING))
    with pytest.raises(ValidationError, match="directional"):
        rc.validate()


def test_relation_configs_validate_both():
    rc = RelationConfigs()
    rc.add("a", "rel", "b", FieldConfig("f", direction=Direction.BOTH, parent_type=a))
    with pytest.raises(ValidationError, match="both"):
        rc.validate()
    rc.add("b", "rel", "a", FieldConfig("g", direction=Direction.BOTH, parent_type=b))
    rc.validate()
    rc.add("a", "self", "a", FieldConfig("h", direction=Direction.BOTH, parent_type=a))
    rc.validate()


def test_relation_configs_validate_none_and_bad_direction():
    rc = RelationConfigs()
    rc.add("a", "rel", "b", FieldConfig("f", direction=Direction.NONE))
    with pytest.raises(ValidationError, match="none"):
        rc.validate()

    bad = RelationConfigs()
    bad.add("a", "rel", "b", FieldConfig("f", direction="sideways"))
    with pytest.raises(ValidationError, match="unrecognized"):
        bad.validate()

    dashed = RelationConfigs()
    dashed.add("a", "my-rel", "b", FieldConfig("f", direction=Direction.OUTGOING))
    with pytest.raises(ValidationError, match="parts"):
        dashed.validate()