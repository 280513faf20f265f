"""Mapping metadata for node types and helpers that work from it."""

from __future__ import annotations

import abc
import threading
import types
from dataclasses import dataclass, field
from typing import Any, Callable

from graphogm.model import (
    LOAD_MAP_FIELD,
    BaseNode,
    Direction,
    InternalError,
    OgmError,
    RelationConfig,
    ValidationError,
)
from graphogm.pk import DEFAULT_PRIMARY_KEY_STRATEGY, PrimaryKeyStrategy


@dataclass
class FieldConfig:
    """How one attribute of a mapped class is stored.

    ``type`` is the declared Python type of the attribute; for relationship
    fields it is the related node class or edge class.
    """

    field_name: str
    name: str = ""
    type: Any = None
    relationship: str = ""
    direction: Direction = Direction.NONE
    many_relationship: bool = False
    properties: bool = False
    primary_key: str = ""
    ignore: bool = False
    is_typedef: bool = False
    typedef_actual: Callable[[Any], Any] | None = None
    parent_type: type | None = None


@dataclass
class StructConfig:
    """The label and field configuration of one mapped class."""

    label: str
    node_type: type | None = None
    fields: list[FieldConfig] = field(default_factory=list)


class Edge(abc.ABC):
    """A relationship that carries its own properties and knows both ends."""

    @abc.abstractmethod
    def get_start_node(self) -> Any:
        """Return the node the edge starts at."""

    @abc.abstractmethod
    def get_end_node(self) -> Any:
        """Return the node the edge ends at."""

    @abc.abstractmethod
    def set_start_node(self, node: Any) -> None:
        """Set the node the edge starts at."""

    @abc.abstractmethod
    def set_end_node(self, node: Any) -> None:
        """Set the node the edge ends at."""

    @classmethod
    @abc.abstractmethod
    def get_start_node_type(cls) -> type:
        """Return the class of the start node."""

    @classmethod
    @abc.abstractmethod
    def get_end_node_type(cls) -> type:
        """Return the class of the end node."""


def _key(node_type: str, relationship: str) -> str:
    return f"{node_type}-{relationship}"


class RelationConfigs:
    """Relationship field configurations keyed by node type and relationship."""

    def __init__(self) -> None:
        self._configs: dict[str, dict[str, list[FieldConfig]]] = {}
        self._lock = threading.Lock()

    def add(
        self, node_type: str, relationship: str, field_type: str, config: FieldConfig
    ) -> None:
        """Record a relationship field of ``node_type`` pointing at ``field_type``."""
        with self._lock:
            by_field = self._configs.setdefault(_key(node_type, relationship), {})
            by_field.setdefault(field_type, []).append(config)

    def get_configs(
        self,
        start_node_type: str,
        start_node_field_type: str,
        end_node_type: str,
        end_node_field_type: str,
        relationship: str,
    ) -> tuple[FieldConfig, FieldConfig]:
        """Return the field configurations on the start and end side of an edge."""
        with self._lock:
            if not self._configs:
                raise OgmError("no configs provided")
            start = self._get_config(
                start_node_type, relationship, start_node_field_type, Direction.OUTGOING
            )
            end = self._get_config(
                end_node_type, relationship, end_node_field_type, Direction.INCOMING
            )
            return start, end

    def _get_config(
        self, node_type: str, relationship: str, field_type: str, direction: Direction
    ) -> FieldConfig:
        key = _key(node_type, relationship)
        by_field = self._configs.get(key)
        if by_field is None:
            raise OgmError(f"no configs for key [{key}]")
        confs = by_field.get(field_type)
        if confs is None:
            raise OgmError(
                f"no configs for key [{key}] and field type [{field_type}]"
            )
        if len(confs) == 1:
            return confs[0]
        if len(confs) > 1:
            for conf in confs:
                if conf.direction == direction:
                    return conf
            raise OgmError("relation with correct direction not found")
        raise InternalError("config not found")

    def validate(self) -> None:
        """Raise ValidationError if relationship directions do not pair up."""
        with self._lock:
            check: dict[str, dict[str, list[str]]] = {}
            for title, by_field in self._configs.items():
                parts = title.split("-")
                if len(parts) != 2:
                    raise ValidationError(
                        f"invalid length for parts [{len(parts)}] should be 2. "
                        f"Rel is [{title}]"
                    )
                rel_type = parts[1]
                for field_type, configs in by_field.items():
                    for config in configs:
                        buckets = check.setdefault(
                            rel_type,
                            {
                                "incoming": [],
                                "outgoing": [],
                                "none": [],
                                "both": [],
                                "both_self": [],
                            },
                        )
                        if config.direction == Direction.INCOMING:
                            buckets["incoming"].append(field_type)
                        elif config.direction == Direction.OUTGOING:
                            buckets["outgoing"].append(field_type)
                        elif config.direction == Direction.NONE:
                            buckets["none"].append(field_type)
                        elif config.direction == Direction.BOTH:
                            parent_name = (
                                config.parent_type.__name__
                                if config.parent_type is not None
                                else None
                            )
                            if field_type == parent_name:
                                buckets["both_self"].append(field_type)
                            else:
                                buckets["both"].append(field_type)
                        else:
                            raise ValidationError(
                                f"unrecognized direction [{config.direction}]"
                            )

            for rel_type, buckets in check.items():
                if len(buckets["outgoing"]) != len(buckets["incoming"]):
                    raise ValidationError(
                        f"invalid directional configuration on relationship [{rel_type}]"
                    )
                if len(buckets["both"]) % 2 != 0:
                    raise ValidationError("invalid length for 'both' validation")
                if len(buckets["none"]) % 2 != 0:
                    raise ValidationError("invalid length for 'none' validation")


class Schema:
    """Registry of mapped classes and the primary key strategy in use."""

    def __init__(
        self, pk_strategy: PrimaryKeyStrategy = DEFAULT_PRIMARY_KEY_STRATEGY
    ) -> None:
        self.pk_strategy = pk_strategy
        self.relations = RelationConfigs()
        self._configs: dict[str, StructConfig] = {}

    def register(self, config: StructConfig) -> None:
        """Add a class's configuration, recording its relationship fields."""
        self._configs[config.label] = config
        for conf in config.fields:
            if conf.relationship and not conf.ignore:
                target = getattr(conf.type, "__name__", str(conf.type))
                self.relations.add(config.label, conf.relationship, target, conf)

    def get(self, label: str) -> StructConfig:
        """Return the configuration registered under ``label``."""
        try:
            return self._configs[label]
        except KeyError:
            raise OgmError(f"struct config not found type ({label})") from None

    def relationships_for_label(self, label: str) -> list[FieldConfig]:
        """Return the non-ignored relationship fields of ``label``."""
        return [
            conf
            for conf in self.get(label).fields
            if not conf.ignore and conf.relationship
        ]

    def __contains__(self, label: object) -> bool:
        return label in self._configs


def handle_node_state(
    pk_strategy: PrimaryKeyStrategy | None, node: BaseNode | None
) -> tuple[bool, int, dict[str, RelationConfig] | None]:
    """Work out whether a node is new, its graph id and its load map.

    Under a non-default primary key strategy a node without a key gets one
    generated here.
    """
    if node is None:
        raise OgmError("value can not be nil")
    if pk_strategy is None:
        raise OgmError("pk strategy can not be nil")

    raw_map = getattr(node, LOAD_MAP_FIELD, None)
    load_map: dict[str, RelationConfig] | None = None
    if raw_map:
        if not isinstance(raw_map, dict):
            raise InternalError(
                "unable to cast conf to [dict[str, RelationConfig]]"
            )
        load_map = raw_map

    graph_id = getattr(node, DEFAULT_PRIMARY_KEY_STRATEGY.field_name, None)
    if graph_id is None:
        is_new, ident = True, 0
    else:
        is_new, ident = False, int(graph_id)

    if pk_strategy.strategy_name == DEFAULT_PRIMARY_KEY_STRATEGY.strategy_name:
        return is_new, ident, load_map

    check_id = getattr(node, pk_strategy.field_name)
    if check_id and not is_new:
        return False, ident, load_map
    if not check_id:
        if pk_strategy.gen_id_func is None:
            raise OgmError("pk strategy has no id generator")
        setattr(node, pk_strategy.field_name, pk_strategy.gen_id_func())
    return True, -1, load_map


def _is_struct_type(cls: Any) -> bool:
    return isinstance(cls, type) and cls.__module__ != "builtins"


def get_type_name(value: Any) -> str:
    """Return the mapped class name of a class, instance, list or ``list[...]``."""
    target = value
    if isinstance(target, types.GenericAlias):
        args = target.__args__
        if target.__origin__ not in (list, tuple) or not args:
            raise OgmError(f"can not take name from {target!r}")
        target = args[0]
    elif isinstance(target, (list, tuple)):
        if not target:
            raise OgmError("can not take name from an empty sequence")
        target = type(target[0])
    elif not isinstance(target, type):
        target = type(target)

    if _is_struct_type(target):
        return target.__name__
    raise OgmError(f"can not take name from kind {{{target.__name__})")


def _is_subclass(declared: Any, base: type) -> bool:
    return isinstance(declared, type) and issubclass(declared, base)


def to_cypher_params(
    schema: Schema, node: Any, config: StructConfig
) -> dict[str, Any]:
    """Convert a node's stored attributes to a map of query parameters."""
    params: dict[str, Any] = {}
    for conf in config.fields:
        if conf.relationship or conf.name == "id" or conf.ignore:
            continue

        value = getattr(node, conf.field_name)

        if conf.properties:
            if _is_subclass(conf.type, dict) and (value is None or isinstance(value, dict)):
                for key, item in (value or {}).items():
                    params[f"{conf.name}.{key}"] = item
            elif _is_subclass(conf.type, list) and (value is None or isinstance(value, list)):
                params[conf.name] = value
            else:
                raise OgmError(
                    f"properties type is not a map or slice, {type(value).__name__}"
                )
            continue

        if conf.is_typedef and conf.typedef_actual is not None and value is not None:
            value = conf.typedef_actual(value)

        if conf.primary_key:
            if conf.primary_key == DEFAULT_PRIMARY_KEY_STRATEGY.strategy_name:
                continue
            params[schema.pk_strategy.db_name] = value
        else:
            params[conf.name] = value
    return params


def traverse_rel_type(end_type: Any, direction: Direction) -> str:
    """Return the label of the node at the far side of a relationship field.

    For an edge class the label of the linked node on the side the direction
    points to is returned.
    """
    if not _is_subclass(end_type, Edge):
        return end_type.__name__

    if direction == Direction.OUTGOING:
        linked = end_type.get_end_node_type()
    else:
        linked = end_type.get_start_node_type()

    if linked is None:
        raise OgmError("get_end_node_type() can not return a nil value")
    if not isinstance(linked, type):
        raise OgmError("cannot convert to a type")
    return linked.__name__