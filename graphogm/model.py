"""Core node types, relationship bookkeeping and error classes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

LOAD_MAP_FIELD = "load_map"


class Direction(enum.Enum):
    """Direction of an edge as seen from the node that declares it."""

    NONE = "none"
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    BOTH = "both"

    def __str__(self) -> str:
        return self.value


class RelationType(enum.IntEnum):
    """How many nodes one side of a relationship may point to."""

    SINGLE = 0
    MULTI = 1


@dataclass
class RelationConfig:
    """Graph ids a relationship field pointed to when the node was loaded."""

    ids: list[int] = field(default_factory=list)
    relation_type: RelationType = RelationType.SINGLE


@dataclass(eq=False)
class BaseNode:
    """Fields every mapped node carries.

    ``id`` is the database's internal graph id; ``load_map`` records which
    relationships were loaded so that removed ones can be deleted on save.
    Nodes compare and hash by identity.
    """

    id: int | None = None
    load_map: dict[str, RelationConfig] = field(default_factory=dict)


@dataclass(eq=False)
class BaseUUIDNode(BaseNode):
    """A node that also carries a UUID primary key."""

    uuid: str = ""


class OgmError(Exception):
    """Base class of all errors raised by the package."""


class ValidationError(OgmError):
    """A configuration or schema failed validation."""


class TransactionError(OgmError):
    """A transaction was used in an invalid state."""


class InternalError(OgmError):
    """An internal invariant was broken."""