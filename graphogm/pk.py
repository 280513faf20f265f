"""Primary key strategies for mapped nodes."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Callable

from graphogm.model import ValidationError


def new_uuid() -> str:
    """Return a fresh random UUID string."""
    return str(uuid.uuid4())


@dataclass
class PrimaryKeyStrategy:
    """How a node's primary key is named, stored and generated."""

    strategy_name: str = ""
    db_name: str = ""
    field_name: str = ""
    id_type: type | None = None
    gen_id_func: Callable[[], Any] | None = None
    noop: bool = False

    def validate(self) -> None:
        """Raise ValidationError if the strategy is incomplete or inconsistent."""
        if not self.strategy_name:
            raise ValidationError("must have strategy name")
        if not self.db_name:
            raise ValidationError("must have db name")
        if self.id_type is None:
            raise ValidationError("must define type of primary key")
        if self.gen_id_func is None:
            raise ValidationError("must define generate id function")
        if self.noop:
            return
        produced = type(self.gen_id_func())
        if produced is not self.id_type:
            raise ValidationError(
                "gen_id_func does not return same type as strategy type "
                f"{produced.__name__} != {self.id_type.__name__}"
            )


UUID_PRIMARY_KEY_STRATEGY = PrimaryKeyStrategy(
    strategy_name="UUID",
    db_name="uuid",
    field_name="uuid",
    id_type=str,
    gen_id_func=new_uuid,
    noop=False,
)

DEFAULT_PRIMARY_KEY_STRATEGY = PrimaryKeyStrategy(
    strategy_name="default",
    db_name="id",
    field_name="id",
    id_type=int,
    gen_id_func=lambda: "",
    noop=True,
)