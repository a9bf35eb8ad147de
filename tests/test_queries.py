from datetime import date

import pytest
from starlette.datastructures import QueryParams

from errors import (
    InvalidDateFormat,
    InvalidFilterValue,
    InvalidPagination,
    InvalidPriceRange,
    InvalidSortField,
    InvalidSortOrder,
    SearchTermRequired,
)
from queries import FILTER, LIST, SEARCH, build_query


def _sql(clause):
    return str(clause.compile())


def _params(clause):
    return clause.compile().params


def test_defaults():
    query = build_query({}, FILTER)
    assert (query.page, query.limit, query.skip, query.take) == (1, 10, 0, 10)
    assert query.where is None
    assert _sql(query.order_by) == "bookings.created_at DESC"
    assert query.filters["sortBy"] == "newest"
    assert query.filters["sortOrder"] == "desc"


def test_ordering_breaks_ties_on_id():
    query = build_query({"sortBy": "status", "sortOrder": "asc"}, FILTER)
    assert [_sql(clause) for clause in query.ordering] == ["bookings.status ASC", "bookings.id ASC"]


def test_window():
    query = build_query({"page": "3", "limit": "25"}, LIST)
    assert (query.skip, query.take) == (50, 25)


def test_pagination_metadata():
    query = build_query({"page": "2", "limit": "2"}, LIST)
    assert query.pagination(5) == {
        "currentPage": 2,
        "totalPages": 3,
        "totalCount": 5,
        "hasNextPage": True,
        "hasPrevPage": True,
        "limit": 2,
    }
    assert query.pagination(0)["totalPages"] == 0


def test_created_at_alias_and_ascending_order():
    query = build_query({"sortBy": "createdAt", "sortOrder": "asc"}, FILTER)
    assert _sql(query.order_by) == "bookings.created_at ASC"


def test_repeated_values_become_in_list():
    params = QueryParams("status=Pending&status=Confirmed&carType=SUV")
    query = build_query(params, FILTER)
    sql = _sql(query.where)
    assert "bookings.status IN" in sql
    assert "bookings.car_type =" in sql
    assert ["Pending", "Confirmed"] in _params(query.where).values()
    assert query.filters["status"] == ["Pending", "Confirmed"]
    assert query.filters["carType"] == "SUV"


def test_ranges_are_inclusive():
    query = build_query({"minPrice": "20", "maxPrice": "50", "dateFrom": "2030-01-01",
                         "dateTo": "2030-01-31T10:00:00Z"}, FILTER)
    sql = _sql(query.where)
    for fragment in ("bookings.price >=", "bookings.price <=", "bookings.date >=", "bookings.date <="):
        assert fragment in sql
    values = list(_params(query.where).values())
    assert values == [date(2030, 1, 1), date(2030, 1, 31), 20.0, 50.0]


def test_list_mode_ignores_price_and_rating():
    query = build_query({"minPrice": "abc", "rating": "9"}, LIST)
    assert query.where is None
    assert "minPrice" not in query.filters


def test_search_mode_requires_term():
    with pytest.raises(SearchTermRequired):
        build_query({}, SEARCH)
    with pytest.raises(SearchTermRequired):
        build_query({"q": "   "}, SEARCH)


def test_search_covers_name_make_model_and_type():
    query = build_query({"q": "bmw"}, SEARCH)
    assert query.search_term == "bmw"
    sql = _sql(query.where)
    for column in ("customer_name", "car_make", "car_model", "car_type"):
        assert f"bookings.{column}" in sql


def test_list_search_uses_same_fields():
    list_sql = _sql(build_query({"search": "x"}, LIST).where)
    search_sql = _sql(build_query({"q": "x"}, SEARCH).where)
    assert list_sql == search_sql


@pytest.mark.parametrize("params, error", [
    ({"page": "0"}, InvalidPagination),
    ({"page": "-2"}, InvalidPagination),
    ({"limit": "101"}, InvalidPagination),
    ({"limit": "ten"}, InvalidPagination),
    ({"sortBy": "colour"}, InvalidSortField),
    ({"sortOrder": "up"}, InvalidSortOrder),
    ({"serviceType": "Moon Wash"}, InvalidFilterValue),
    ({"carType": "bus"}, InvalidFilterValue),
    ({"status": "Lost"}, InvalidFilterValue),
    ({"rating": "0"}, InvalidFilterValue),
    ({"dateFrom": "31/12/2030"}, InvalidDateFormat),
    ({"dateTo": "tomorrow"}, InvalidDateFormat),
    ({"minPrice": "cheap"}, InvalidPriceRange),
    ({"maxPrice": "-1"}, InvalidPriceRange),
    ({"maxPrice": "inf"}, InvalidPriceRange),
    ({"minPrice": "50", "maxPrice": "20"}, InvalidPriceRange),
])
def test_invalid_parameters(params, error):
    with pytest.raises(error):
        build_query(params, FILTER)


def test_error_codes():
    with pytest.raises(InvalidPriceRange) as exc_info:
        build_query({"minPrice": "50", "maxPrice": "20"}, FILTER)
    assert exc_info.value.to_dict() == {
        "success": False,
        "error": {"message": "minPrice cannot be greater than maxPrice", "code": "INVALID_PRICE_RANGE"},
    }
