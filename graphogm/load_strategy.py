"""Query generation for loading nodes, by path or from the mapped schema."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from graphogm.model import Direction, OgmError, ValidationError
from graphogm.schema import FieldConfig, Schema, traverse_rel_type


class LoadStrategy(enum.IntEnum):
    """How load queries are generated."""

    PATH = 0
    SCHEMA = 1

    def validate(self) -> None:
        """Raise ValidationError if the strategy is not a known one."""
        if self not in (LoadStrategy.PATH, LoadStrategy.SCHEMA):
            raise ValidationError(f"invalid load strategy {int(self)}")


@dataclass(frozen=True)
class Condition:
    """A comparison in a WHERE clause, optionally joined to others by AND.

    ``check`` is written into the query as is, e.g. ``$param``.
    """

    name: str
    check: str
    field: str = ""
    function: str = ""
    operator: str = "="
    conjuncts: tuple[Condition, ...] = ()

    def and_(self, other: Condition) -> Condition:
        """Return a condition that holds when this one and ``other`` both hold."""
        return replace(self, conjuncts=self.conjuncts + (other,))

    def _render_self(self) -> str:
        if not self.name:
            raise ValidationError("condition name can not be empty")
        if self.function:
            subject = f"{self.function}({self.name})"
        elif self.field:
            subject = f"{self.name}.{self.field}"
        else:
            subject = self.name
        return f"{subject} {self.operator} {self.check}"

    def to_cypher(self) -> str:
        """Render the condition as query text."""
        parts = [self._render_self()]
        parts.extend(conjunct.to_cypher() for conjunct in self.conjuncts)
        return " AND ".join(parts)


class Query:
    """A query assembled clause by clause; each method returns the query."""

    def __init__(self, *clauses: str) -> None:
        self._clauses: list[str] = [clause for clause in clauses if clause]

    def _append(self, clause: str) -> Query:
        if clause:
            self._clauses.append(clause)
        return self

    def where(self, condition: Condition) -> Query:
        """Add a WHERE clause."""
        return self._append(f"WHERE {condition.to_cypher()}")

    def order_by(self, name: str, member: str = "", desc: bool = False) -> Query:
        """Add an ORDER BY clause on ``name`` or ``name.member``."""
        if not name:
            raise ValidationError("order by name can not be empty")
        target = f"{name}.{member}" if member else name
        return self._append(f"ORDER BY {target}{' DESC' if desc else ''}")

    def skip(self, count: int) -> Query:
        """Add a SKIP clause."""
        return self._append(f"SKIP {count}")

    def limit(self, count: int) -> Query:
        """Add a LIMIT clause."""
        return self._append(f"LIMIT {count}")

    def to_cypher(self) -> str:
        """Render the whole query as text."""
        if not self._clauses:
            raise OgmError("query is empty")
        return " ".join(self._clauses)

    def __str__(self) -> str:
        return self.to_cypher()


def _jumps(min_jumps: int, max_jumps: int) -> str:
    if min_jumps == 0 and max_jumps == 0:
        return "--"
    return f"-[*{min_jumps}..{max_jumps}]-"


def _check_common(variable: str, label: str, depth: int) -> None:
    if not variable:
        raise ValidationError("variable name cannot be empty")
    if not label:
        raise ValidationError("label can not be empty")
    if depth < 0:
        raise ValidationError("depth can not be less than 0")


def _depth_path(variable: str, depth: int) -> str:
    path = f"p=({variable})"
    if depth != 0:
        path += f"{_jumps(0, depth)}()"
    return path


def _id_condition(
    variable: str, field_on: str, param_name: str, is_graph_id: bool
) -> Condition:
    if is_graph_id:
        return Condition(name=variable, function="ID", check="$" + param_name)
    return Condition(name=variable, field=field_on, check="$" + param_name)


def path_load_strategy_many(
    variable: str, label: str, depth: int, constraint: Condition | None = None
) -> Query:
    """Build a query loading every node with paths up to ``depth`` hops."""
    _check_common(variable, label, depth)
    query = Query(f"MATCH {_depth_path(variable, depth)}")
    if constraint is not None:
        query.where(constraint)
    return query._append("RETURN p")


def path_load_strategy_one(
    variable: str,
    label: str,
    field_on: str,
    param_name: str,
    is_graph_id: bool,
    depth: int,
    constraint: Condition | None = None,
) -> Query:
    """Build a query loading one node, matched by key, with its paths."""
    _check_common(variable, label, depth)
    query = Query(f"MATCH {_depth_path(variable, depth)}")
    condition = _id_condition(variable, field_on, param_name, is_graph_id)
    query.where(constraint.and_(condition) if constraint is not None else condition)
    return query._append("RETURN p")


def path_load_strategy_edge_constraint(
    start_variable: str,
    start_label: str,
    end_label: str,
    end_target_field: str,
    min_jumps: int,
    max_jumps: int,
    depth: int,
    constraint: Condition | None = None,
) -> Query:
    """Build a query loading nodes related to an end node matched on a field."""
    if not start_variable:
        raise ValidationError("variable name cannot be empty")
    if not start_label:
        raise ValidationError("label can not be empty")
    if not end_label:
        raise ValidationError("label can not be empty")
    if not end_target_field:
        raise ValidationError("end target field can not be empty")

    path = "p="
    if depth > 0:
        path += f"(){_jumps(0, depth)}"
    path += (
        f"({start_variable}:{start_label})"
        f"{_jumps(min_jumps, max_jumps)}"
        f"(:{end_label} {{{end_target_field}: ${end_target_field}}})"
    )
    query = Query(f"MATCH {path}")
    if constraint is not None:
        query.where(constraint)
    return query._append("RETURN p")


def _rel_string(variable: str, rel: FieldConfig) -> str:
    start = "<-" if rel.direction == Direction.INCOMING else "-"
    end = "->" if rel.direction == Direction.OUTGOING else "-"
    return f"{start}[{variable}:{rel.relationship}]{end}"


def _list_comprehension(
    schema: Schema,
    from_var: str,
    label: str,
    rel: FieldConfig,
    level: int,
    depth: int,
) -> str:
    rel_var = f"r_{rel.relationship[0]}_{level}"
    to_label = traverse_rel_type(rel.type, rel.direction)
    to_var = f"n_{to_label[0]}_{level}"
    clause = (
        f"[({from_var}){_rel_string(rel_var, rel)}({to_var}:{to_label}) "
        f"| [{rel_var}, {to_var}"
    )
    if depth > 0:
        to_rels = schema.relationships_for_label(label)
        if to_rels:
            expansion = _expand(schema, to_var, to_label, to_rels, level + 1, depth - 1)
            clause += f", [{expansion}]"
    return clause + "]]"


def _expand(
    schema: Schema,
    variable: str,
    label: str,
    rels: list[FieldConfig],
    level: int,
    depth: int,
) -> str:
    return ", ".join(
        _list_comprehension(schema, variable, label, rel, level, depth) for rel in rels
    )


def _expand_bootstrap(schema: Schema, variable: str, label: str, depth: int) -> str:
    rels = schema.relationships_for_label(label)
    if depth <= 0:
        return ""
    expanded = _expand(schema, variable, label, rels, 1, depth - 1)
    return f", [{expanded}]" if rels else expanded


def schema_load_strategy_many(
    schema: Schema,
    variable: str,
    label: str,
    depth: int,
    constraint: Condition | None = None,
) -> Query:
    """Build a query loading every node of ``label`` expanded along the schema."""
    _check_common(variable, label, depth)
    query = Query(f"MATCH ({variable}:{label})")
    if constraint is not None:
        query.where(constraint)
    query._append(f"RETURN {variable}")
    if depth > 0:
        query._append(_expand_bootstrap(schema, variable, label, depth))
    return query


def schema_load_strategy_one(
    schema: Schema,
    variable: str,
    label: str,
    field_on: str,
    param_name: str,
    is_graph_id: bool,
    depth: int,
    constraint: Condition | None = None,
) -> Query:
    """Build a query loading one node of ``label`` expanded along the schema."""
    _check_common(variable, label, depth)
    query = Query(f"MATCH ({variable}:{label})")
    condition = _id_condition(variable, field_on, param_name, is_graph_id)
    query.where(constraint.and_(condition) if constraint is not None else condition)
    query._append(f"RETURN {variable}")
    if depth > 0:
        query._append(_expand_bootstrap(schema, variable, label, depth))
    return query