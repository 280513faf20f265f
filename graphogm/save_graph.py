"""Walks a graph of mapped objects to work out what a save has to write.

Objects are identified by ``id()`` while the graph is walked, because new
nodes have no graph id yet. The ``node_ref`` map of a SaveGraph keeps every
visited object alive, so those identities stay valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from graphogm.model import Direction, OgmError, RelationConfig, RelationType
from graphogm.pk import DEFAULT_PRIMARY_KEY_STRATEGY
from graphogm.schema import (
    Edge,
    FieldConfig,
    Schema,
    get_type_name,
    handle_node_state,
    to_cypher_params,
)


@dataclass
class NodeCreate:
    """A node to create or update."""

    params: dict[str, Any]
    node_type: type
    id: int
    pointer: int
    is_new: bool


@dataclass
class RelCreate:
    """An edge to merge between two nodes, identified by object identity."""

    start_node_ptr: int
    end_node_ptr: int
    params: dict[str, Any] = field(default_factory=dict)
    direction: Direction = Direction.NONE


@dataclass
class SaveGraph:
    """Everything a walk of an object graph found.

    ``nodes`` maps label to object identity to node configuration,
    ``relations`` maps relationship type to the edges of that type,
    ``node_id_ref`` maps object identity to graph id for nodes already stored,
    ``node_ref`` maps object identity to the object itself and
    ``old_rels`` holds the load maps of already stored nodes.
    """

    nodes: dict[str, dict[int, NodeCreate]] = field(default_factory=dict)
    relations: dict[str, list[RelCreate]] = field(default_factory=dict)
    node_id_ref: dict[int, int] = field(default_factory=dict)
    node_ref: dict[int, Any] = field(default_factory=dict)
    old_rels: dict[int, dict[str, RelationConfig]] = field(default_factory=dict)


@dataclass
class _Follow:
    parent_ptr: int
    edge_label: str
    parent_is_start: bool
    direction: Direction
    edge_params: dict[str, Any]
    node: Any


def _flip(direction: Direction) -> Direction:
    if direction == Direction.INCOMING:
        return Direction.OUTGOING
    if direction == Direction.OUTGOING:
        return Direction.INCOMING
    return direction


def _related_values(node: Any, conf: FieldConfig) -> Iterator[Any]:
    value = getattr(node, conf.field_name, None)
    if value is None:
        return
    if conf.many_relationship:
        yield from value
    else:
        yield value


def _process_struct(
    schema: Schema, field_conf: FieldConfig, rel_value: Any, cur_ptr: int
) -> _Follow:
    """Work out which object a relationship value leads to and how."""
    edge_label = field_conf.relationship
    type_name = get_type_name(rel_value)
    if type_name not in schema:
        raise OgmError(f"cannot find config for {edge_label}")
    edge_conf = schema.get(type_name)

    if not isinstance(rel_value, Edge):
        return _Follow(
            cur_ptr,
            edge_label,
            field_conf.direction == Direction.OUTGOING,
            field_conf.direction,
            {},
            rel_value,
        )

    start = rel_value.get_start_node()
    end = rel_value.get_end_node()
    if start is None or end is None:
        raise OgmError("edge is invalid, sides are not set")

    params = to_cypher_params(schema, rel_value, edge_conf)
    if id(start) == cur_ptr:
        return _Follow(cur_ptr, edge_label, True, field_conf.direction, params, end)
    if id(end) == cur_ptr:
        return _Follow(cur_ptr, edge_label, False, field_conf.direction, params, start)
    raise OgmError("edge is invalid, doesn't point to parent vertex")


def _relationship_fields(schema: Schema, node: Any) -> list[FieldConfig]:
    config = schema.get(get_type_name(node))
    return [conf for conf in config.fields if conf.relationship]


class _Parser:
    def __init__(self, schema: Schema, max_depth: int) -> None:
        self.schema = schema
        self.max_depth = max_depth
        self.graph = SaveGraph()

    def parse(
        self,
        parent_ptr: int | None,
        edge_label: str,
        parent_is_start: bool,
        direction: Direction,
        edge_params: dict[str, Any] | None,
        current: Any,
        depth: int,
    ) -> None:
        if depth > self.max_depth:
            return

        graph = self.graph
        cur_ptr = id(current)
        config = self.schema.get(get_type_name(current))
        is_new, graph_id, rel_conf = handle_node_state(self.schema.pk_strategy, current)

        if parent_ptr is not None:
            rels = graph.relations.setdefault(edge_label, [])
            if parent_is_start:
                start, end, cur_dir = parent_ptr, cur_ptr, direction
            else:
                start, end, cur_dir = cur_ptr, parent_ptr, _flip(direction)
            if not any(
                rel.start_node_ptr == start and rel.end_node_ptr == end for rel in rels
            ):
                rels.append(
                    RelCreate(
                        start_node_ptr=start,
                        end_node_ptr=end,
                        params=edge_params if edge_params is not None else {},
                        direction=cur_dir,
                    )
                )

        if not is_new:
            graph.node_id_ref.setdefault(cur_ptr, graph_id)
            graph.old_rels.setdefault(cur_ptr, rel_conf if rel_conf is not None else {})

        graph.node_ref.setdefault(cur_ptr, current)

        params = to_cypher_params(self.schema, current, config)
        graph.nodes.setdefault(config.label, {})[cur_ptr] = NodeCreate(
            params=params if params is not None else {},
            node_type=type(current),
            id=graph_id,
            pointer=cur_ptr,
            is_new=is_new,
        )

        for conf in config.fields:
            if not conf.relationship:
                continue
            for rel_value in _related_values(current, conf):
                follow = _process_struct(self.schema, conf, rel_value, cur_ptr)
                self.parse(
                    follow.parent_ptr,
                    follow.edge_label,
                    follow.parent_is_start,
                    follow.direction,
                    follow.edge_params,
                    follow.node,
                    depth + 1,
                )


def parse_struct(schema: Schema, root: Any, max_depth: int) -> SaveGraph:
    """Walk ``root`` and its relationships up to ``max_depth`` hops.

    New nodes get a primary key from the schema's strategy on the way.
    """
    if root is None:
        raise OgmError("obj can not be nil")
    parser = _Parser(schema, max_depth)
    parser.parse(None, "", False, Direction.BOTH, None, root, 0)
    return parser.graph


def _graph_id(node: Any) -> int:
    value = getattr(node, DEFAULT_PRIMARY_KEY_STRATEGY.field_name, None)
    return int(value) if value else 0


class _CurRels:
    def __init__(self, schema: Schema, max_depth: int) -> None:
        self.schema = schema
        self.max_depth = max_depth
        self.cur_rels: dict[int, dict[str, RelationConfig]] = {}

    def walk(self, parent_ptr: int | None, current: Any, depth: int) -> None:
        if depth > self.max_depth:
            return

        cur_ptr = id(current)
        if parent_ptr == cur_ptr:
            return

        if getattr(current, DEFAULT_PRIMARY_KEY_STRATEGY.field_name, None) is None:
            raise OgmError("id not set")
        node_id = _graph_id(current)

        if node_id in self.cur_rels:
            return
        record: dict[str, RelationConfig] = {}
        self.cur_rels[node_id] = record

        for conf in _relationship_fields(self.schema, current):
            relation_type = (
                RelationType.MULTI if conf.many_relationship else RelationType.SINGLE
            )
            for rel_value in _related_values(current, conf):
                follow = _process_struct(self.schema, conf, rel_value, cur_ptr)
                entry = record.setdefault(
                    conf.field_name, RelationConfig(ids=[], relation_type=relation_type)
                )
                entry.ids.append(_graph_id(follow.node))
                if id(follow.node) != parent_ptr:
                    self.walk(follow.parent_ptr, follow.node, depth + 1)


def generate_cur_rels(
    schema: Schema, root: Any, max_depth: int
) -> dict[int, dict[str, RelationConfig]]:
    """Return, per graph id, the relationships each node now points to."""
    if root is None:
        raise OgmError("obj can not be nil")
    walker = _CurRels(schema, max_depth)
    walker.walk(None, root, 0)
    return walker.cur_rels


def calculate_dels(
    old_rels: dict[Any, dict[str, RelationConfig]],
    cur_rels: dict[int, dict[str, RelationConfig]],
    lookup: dict[Any, int],
) -> dict[int, list[int]]:
    """Return, per start node graph id, the end node ids whose edges must go."""
    dels: dict[int, list[int]] = {}
    for ptr, old_conf in old_rels.items():
        try:
            old_id = lookup[ptr]
        except KeyError:
            raise OgmError(f"graph id not found for ptr [{ptr}]") from None

        cur_conf = cur_rels.get(old_id)
        if cur_conf is None:
            continue

        for field_name, old_field in (old_conf or {}).items():
            cur_field = cur_conf.get(field_name)
            for rel_id in old_field.ids:
                if cur_field is None or rel_id not in cur_field.ids:
                    dels.setdefault(old_id, []).append(rel_id)
    return dels