"""Writes a graph of mapped objects to the database inside a transaction."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Protocol, Sequence, runtime_checkable

from graphogm.model import LOAD_MAP_FIELD, InternalError, OgmError
from graphogm.pk import DEFAULT_PRIMARY_KEY_STRATEGY
from graphogm.save_graph import (
    RelCreate,
    SaveGraph,
    calculate_dels,
    generate_cur_rels,
    parse_struct,
)
from graphogm.schema import Schema


@runtime_checkable
class Transaction(Protocol):
    """An open database transaction that runs parameterised queries."""

    def run(
        self, query: str, params: dict[str, Any] | None
    ) -> Iterable[Sequence[Any]]:
        """Run ``query`` and return its rows as sequences of values."""
        ...


TransactionWork = Callable[[Transaction], Any]


def _run(
    tx: Transaction,
    query: str,
    params: dict[str, Any] | None,
    context: str,
    error: type[OgmError] = OgmError,
) -> list[Sequence[Any]]:
    try:
        return list(tx.run(query, params))
    except Exception as err:
        raise error(f"{context}, {err}") from err


def _record_new_id(graph: SaveGraph, row: Sequence[Any]) -> None:
    if len(row) != 2:
        return
    str_ptr, graph_id = row
    if not isinstance(str_ptr, str):
        raise InternalError("cannot cast row[0] to string")
    try:
        ptr = int(str_ptr)
    except ValueError as err:
        raise OgmError(f"failed to parse ptr string to int, {err}") from err
    if not isinstance(graph_id, int) or isinstance(graph_id, bool):
        raise InternalError("cannot cast row[1] to int")

    graph.node_id_ref[ptr] = graph_id
    node = graph.node_ref.get(ptr)
    if node is None:
        raise OgmError(f"cannot find val for ptr [{ptr}]")
    setattr(node, DEFAULT_PRIMARY_KEY_STRATEGY.field_name, graph_id)


def create_nodes(tx: Transaction, graph: SaveGraph) -> None:
    """Create new nodes and update stored ones, recording new graph ids."""
    for label, nodes in graph.nodes.items():
        update_rows: list[dict[str, Any]] = []
        new_rows: list[dict[str, Any]] = []
        for ptr, config in nodes.items():
            row: dict[str, Any] = {"obj": config.params}
            if ptr in graph.node_id_ref:
                row["id"] = graph.node_id_ref[ptr]
                update_rows.append(row)
            else:
                row["ptr"] = str(ptr)
                new_rows.append(row)

        if new_rows:
            query = (
                "UNWIND $rows as row "
                f"CREATE(n:`{label}`) "
                "SET n += row.obj "
                "RETURN row.ptr AS ptr, ID(n) AS id"
            )
            rows = _run(
                tx, query, {"rows": new_rows}, "failed to execute new node query"
            )
            for row in rows:
                _record_new_id(graph, row)

        if update_rows:
            query = (
                "UNWIND $rows as row "
                f"MATCH (n:`{label}`) "
                "WHERE ID(n) = row.id "
                "SET n += row.obj"
            )
            _run(tx, query, {"rows": update_rows}, "failed to run update query")


def relate_nodes(
    tx: Transaction, relations: dict[str, list[RelCreate]], lookup: dict[int, int]
) -> None:
    """Merge the given edges between nodes whose graph ids are in ``lookup``."""
    if not relations:
        raise OgmError("relations can not be nil or empty")

    for label, rels in relations.items():
        if not rels:
            continue
        rows: list[dict[str, Any]] = []
        for rel in rels:
            start_id = lookup.get(rel.start_node_ptr)
            if start_id is None:
                raise OgmError(f"graph id not found for ptr {rel.start_node_ptr}")
            end_id = lookup.get(rel.end_node_ptr)
            if end_id is None:
                raise OgmError(f"graph id not found for ptr {rel.end_node_ptr}")
            if rel.params is None:
                rel.params = {}
            rows.append(
                {"startNodeId": start_id, "endNodeId": end_id, "props": rel.params}
            )

        query = (
            "UNWIND $rows as row "
            "MATCH (startNode) WHERE ID(startNode) = row.startNodeId "
            "WITH row, startNode "
            "MATCH (endNode) WHERE ID(endNode) = row.endNodeId "
            f"MERGE (startNode)-[rel:{label}]->(endNode) "
            "SET rel += row.props"
        )
        _run(tx, query, {"rows": rows}, "failed to relate nodes")


def remove_relations(tx: Transaction, dels: dict[int, list[int]]) -> None:
    """Delete edges from each start node id to the listed end node ids."""
    if not dels:
        return
    rows = [
        {"startNodeId": start_id, "endNodeIds": end_ids}
        for start_id, end_ids in dels.items()
    ]
    query = (
        "UNWIND $rows as row "
        "MATCH (start)-[e]-(end) "
        "WHERE id(start) = row.startNodeId and id(end) in row.endNodeIds "
        "DELETE e"
    )
    _run(tx, query, {"rows": rows}, "failed to remove relations", InternalError)


def _is_mapped_object(obj: Any) -> bool:
    return not isinstance(obj, type) and type(obj).__module__ != "builtins"


def save_depth(schema: Schema, obj: Any, depth: int) -> TransactionWork:
    """Return work that saves ``obj`` and its relationships up to ``depth`` hops."""

    def work(tx: Transaction) -> Any:
        if obj is None:
            raise OgmError("obj can not be nil")
        if depth < 0:
            raise OgmError("cannot save a depth less than 0")
        if not _is_mapped_object(obj):
            raise OgmError(f"obj must be a mapped object, not {type(obj).__name__}")

        try:
            graph = parse_struct(schema, obj, depth)
        except OgmError as err:
            raise OgmError(f"failed to parse struct, {err}") from err

        try:
            create_nodes(tx, graph)
        except OgmError as err:
            raise OgmError(f"failed to create nodes, {err}") from err

        try:
            cur_rels = generate_cur_rels(schema, obj, depth)
        except OgmError as err:
            raise OgmError(
                f"failed to calculate current relationships, {err}"
            ) from err

        try:
            dels = calculate_dels(graph.old_rels, cur_rels, graph.node_id_ref)
        except OgmError as err:
            raise OgmError(
                f"failed to calculate relationships to delete, {err}"
            ) from err

        for ptr, node in graph.node_ref.items():
            graph_id = graph.node_id_ref.get(ptr)
            if graph_id is None:
                raise OgmError(f"graph id for node ptr [{ptr}] not found")
            load_conf = cur_rels.get(graph_id)
            if load_conf is None:
                raise OgmError(f"load config not found for node [{graph_id}]")
            setattr(node, LOAD_MAP_FIELD, load_conf)

        if dels:
            remove_relations(tx, dels)
        if graph.relations:
            relate_nodes(tx, graph.relations, graph.node_id_ref)
        return obj

    return work