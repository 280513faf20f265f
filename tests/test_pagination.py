import pytest

from graphogm.model import OgmError, ValidationError
from graphogm.pagination import Pagination


@pytest.mark.parametrize("page", [0, 1, 7])
@pytest.mark.parametrize("limit", [2, 10, 100])
def test_rejected_configurations(page, limit):
    pagination = Pagination(
        page_number=page,
        limit_per_page=limit,
        order_by_var_name="n",
        order_by_field="name",
    )
    with pytest.raises(ValidationError):
        pagination.validate()


def test_error_message():
    pagination = Pagination(0, 5, "n", "name", True)
    with pytest.raises(OgmError, match="pagination configuration invalid"):
        pagination.validate()


def test_defaults():
    pagination = Pagination()
    assert pagination.page_number == 0
    assert pagination.limit_per_page == 0
    assert pagination.order_by_desc is False