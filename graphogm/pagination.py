"""Pagination settings for load queries."""

from __future__ import annotations

from dataclasses import dataclass

from graphogm.model import ValidationError


@dataclass
class Pagination:
    """Page number, page size and ordering for a load query."""

    page_number: int = 0
    limit_per_page: int = 0
    order_by_var_name: str = ""
    order_by_field: str = ""
    order_by_desc: bool = False

    def validate(self) -> None:
        """Raise ValidationError for the rejected configuration."""
        if (
            self.page_number >= 0
            and self.limit_per_page > 1
            and self.order_by_field != ""
            and self.order_by_var_name != ""
        ):
            raise ValidationError(
                "pagination configuration invalid, please double check"
            )