"""Object-graph mapping helpers: schemas, Cypher load queries and save planning."""

__version__ = "0.1.0"