# graphogm

Object-graph mapping helpers for property-graph databases that speak Cypher.
You describe your node and edge classes once in a `Schema`. graphogm then:

- builds Cypher load queries, either from paths or by expanding along the
  schema's relationships;
- walks an object graph to a given depth and works out which nodes to create
  or update, which edges to merge and which edges to delete;
- sends those write statements through any transaction object you supply.

It has no runtime dependencies.

## Installation

```
pip install graphogm
```

## Modules

| Module | Contents |
| --- | --- |
| `graphogm.model` | `BaseNode`, `BaseUUIDNode`, `RelationConfig`, `RelationType`, `Direction`, and the error classes |
| `graphogm.pk` | `PrimaryKeyStrategy`, `new_uuid()`, `UUID_PRIMARY_KEY_STRATEGY`, `DEFAULT_PRIMARY_KEY_STRATEGY` |
| `graphogm.schema` | `FieldConfig`, `StructConfig`, `Schema`, `RelationConfigs`, `Edge`, and helpers |
| `graphogm.load_strategy` | `LoadStrategy`, `Condition`, `Query`, and the load query builders |
| `graphogm.pagination` | `Pagination` |
| `graphogm.save_graph` | `parse_struct`, `generate_cur_rels`, `calculate_dels`, `SaveGraph`, `NodeCreate`, `RelCreate` |
| `graphogm.save` | `Transaction`, `save_depth`, `create_nodes`, `relate_nodes`, `remove_relations` |
| `graphogm.log` | `Logger`, `DefaultLogger`, `DriverLogger`, `get_default_logger()` |
| `graphogm.examples` | sample types `ExampleObject`, `ExampleObject2` and `SpecialEdge`, with link/unlink helpers |

## Nodes and the schema

Node classes are dataclasses that derive from `BaseNode` or from
`BaseUUIDNode`:

- `BaseNode` carries `id`, which is the graph id, and `load_map`, a
  `dict[str, RelationConfig]` recording what each relationship field held
  when the node was last loaded or saved.
- `BaseUUIDNode` adds a `uuid` primary key.
- Nodes compare and hash by identity.

A `Schema` is built with a `PrimaryKeyStrategy`. It holds one `StructConfig`
per label:

- `Schema.register()` adds a `StructConfig` and records its relationship
  fields in `Schema.relations`, a `RelationConfigs`.
- `RelationConfigs.validate()` raises `ValidationError` in these cases:
  - a relationship has unequal numbers of incoming and outgoing fields;
  - a relationship has an odd number of `both` fields;
  - a relationship has an odd number of `none` fields.

A relationship that carries its own properties is a subclass of `Edge`. It
implements these methods:

- `get_start_node` and `get_end_node`;
- `set_start_node` and `set_end_node`;
- `get_start_node_type` and `get_end_node_type`.

```python
from dataclasses import dataclass, field

from graphogm.model import BaseUUIDNode, Direction
from graphogm.pk import UUID_PRIMARY_KEY_STRATEGY
from graphogm.schema import FieldConfig, Schema, StructConfig


@dataclass(eq=False)
class Person(BaseUUIDNode):
    name: str = ""
    friends: list["Person"] = field(default_factory=list)


schema = Schema(UUID_PRIMARY_KEY_STRATEGY)
schema.register(
    StructConfig(
        label="Person",
        node_type=Person,
        fields=[
            FieldConfig("id", name="id", type=int, primary_key="default"),
            FieldConfig("uuid", name="uuid", type=str, primary_key="UUID"),
            FieldConfig("name", name="name", type=str),
            FieldConfig(
                "friends",
                type=Person,
                relationship="FRIEND",
                direction=Direction.BOTH,
                many_relationship=True,
            ),
        ],
    )
)
```

## Building load queries

Each builder returns a `Query`. `Query.to_cypher()` renders the query as
text.

- Path strategy:
  - `path_load_strategy_many`
  - `path_load_strategy_one`
  - `path_load_strategy_edge_constraint`
- Schema strategy, which expands along the registered relationships:
  - `schema_load_strategy_many`
  - `schema_load_strategy_one`

```python
from graphogm.load_strategy import (
    Condition,
    path_load_strategy_one,
    schema_load_strategy_many,
)

path_load_strategy_one("n", "Person", "uuid", "uuid", False, 0).to_cypher()
# 'MATCH p=(n) WHERE n.uuid = $uuid RETURN p'

only_bob = Condition(name="n", field="name", check="$name")
schema_load_strategy_many(schema, "n", "Person", 0, only_bob).to_cypher()
# 'MATCH (n:Person) WHERE n.name = $name RETURN n'
```

A `Query` can be extended further with `where`, `order_by`, `skip` and
`limit`. Each of these returns the same query.

`Condition.and_()` joins two conditions with AND.

`Pagination` holds a page number, a page size and an ordering.
`Pagination.validate()` raises `ValidationError` when all of the following
hold:

- the page number is 0 or more;
- the page size is greater than 1;
- both ordering fields are set.

## Saving

`save_depth(schema, obj, depth)` returns a unit of work. Call it with a
`Transaction`, which is any object with a `run(query, params)` method that
returns rows. The work does the following, in order:

1. Walks `obj` and its relationships down to `depth` hops. New nodes are
   given a primary key by the schema's strategy.
2. Creates the new nodes and updates the stored ones. It writes each new
   graph id back to the node's `id`.
3. Deletes the edges that a stored node's `load_map` lists but its fields no
   longer hold.
4. Merges the current edges.
5. Sets each node's `load_map` to the relationships it now holds.

It returns `obj`.

The planning steps can also be run without a database:

- `parse_struct` returns a `SaveGraph`.
- `generate_cur_rels` returns the current relationships per graph id.
- `calculate_dels` returns the edges to delete.

## Logging

`get_default_logger()` returns a `DefaultLogger`. It writes each message to
standard error, or to a stream you pass in, with a timestamp and a level tag.
`DefaultLogger.fatal()` logs the message and then raises `SystemExit(1)`.

`DriverLogger` wraps any `Logger` and provides the `(name, ident, msg, ...)`
style of call.

## Errors

Every failure raises `OgmError` or one of its subclasses:

- `ValidationError`
- `TransactionError`
- `InternalError`

## What this package does not do

graphogm does not connect to a database. It has no session or driver layer
and no command-line tool. It does not decode query results back into
objects.

The load builders only produce query text, which you run yourself. Saving
goes through a transaction object that you supply.

It does not manage indexes or constraints. Schemas are not read from class
annotations; you build every `StructConfig` by hand.