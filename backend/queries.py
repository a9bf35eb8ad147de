"""Translate list/search/filter query-string parameters into a booking query.

Every parameter is validated before anything is returned, so a bad value
never results in a partially applied query. The output is plain SQLAlchemy
expressions plus a ``(skip, take)`` window; nothing here touches a session.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import and_, or_

from errors import (
    InvalidDateFormat,
    InvalidFilterValue,
    InvalidPagination,
    InvalidPriceRange,
    InvalidSortField,
    InvalidSortOrder,
    SearchTermRequired,
)
from models import Booking
from services import CAR_TYPES, SERVICE_TYPES, STATUSES

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT_BY = "newest"
DEFAULT_SORT_ORDER = "desc"

SORT_COLUMNS = {
    "newest": Booking.created_at,
    "createdAt": Booking.created_at,
    "price": Booking.price,
    "duration": Booking.duration,
    "status": Booking.status,
    "date": Booking.date,
    "rating": Booking.rating,
}
SORT_ORDERS = ("asc", "desc")
VALID_RATINGS = ("1", "2", "3", "4", "5")

# one field set for every search, list and /search alike
SEARCH_COLUMNS = (Booking.customer_name, Booking.car_make, Booking.car_model, Booking.car_type)

LIST = "list"
SEARCH = "search"
FILTER = "filter"


@dataclass
class BookingQuery:
    conditions: list = field(default_factory=list)
    order_by: Any = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    filters: dict = field(default_factory=dict)
    search_term: Optional[str] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit

    @property
    def ordering(self) -> tuple:
        # id breaks ties so pages never overlap
        return (self.order_by, Booking.id.asc())

    @property
    def where(self):
        return and_(*self.conditions) if self.conditions else None

    def pagination(self, total_count: int) -> dict:
        total_pages = math.ceil(total_count / self.limit)
        return {
            "currentPage": self.page,
            "totalPages": total_pages,
            "totalCount": total_count,
            "hasNextPage": self.page < total_pages,
            "hasPrevPage": self.page > 1,
            "limit": self.limit,
        }


def _values(params, key: str) -> list[str]:
    """All non-blank values for a key; repeated keys become a list."""
    if hasattr(params, "getlist"):
        raw = params.getlist(key)
    else:
        raw = params.get(key)
        if raw is None:
            raw = []
        elif not isinstance(raw, (list, tuple)):
            raw = [raw]
    return [str(v).strip() for v in raw if v is not None and str(v).strip() != ""]


def _first(params, key: str) -> Optional[str]:
    values = _values(params, key)
    return values[0] if values else None


def _echo(values: list):
    if not values:
        return None
    return values[0] if len(values) == 1 else values


def parse_positive_int(raw: Optional[str], default: int, name: str, maximum: Optional[int] = None) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = None
    if value is None or value < 1 or (maximum is not None and value > maximum):
        if maximum is not None:
            raise InvalidPagination(f"{name} must be a positive integer between 1 and {maximum}")
        raise InvalidPagination(f"{name} must be a positive integer")
    return value


def parse_date(raw: str, name: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDateFormat(f"Invalid {name} format. Use ISO 8601 format (YYYY-MM-DD)") from None


def parse_price(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or value < 0:
        raise InvalidPriceRange(f"{name} must be a non-negative number")
    return value


def _check_choices(values: list[str], choices, label: str) -> None:
    invalid = [v for v in values if v not in choices]
    if invalid:
        raise InvalidFilterValue(f"Invalid {label}: {', '.join(invalid)}")


def _equals(column, values: list):
    return column == values[0] if len(values) == 1 else column.in_(values)


def search_condition(term: str):
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in SEARCH_COLUMNS))


def build_query(params, mode: str = FILTER) -> BookingQuery:
    """Build a BookingQuery from query parameters.

    ``mode`` selects the vocabulary: ``list`` accepts the equality, date and
    ``search`` filters; ``search`` requires ``q``; ``filter`` additionally
    accepts price and rating bounds.
    """
    page = parse_positive_int(_first(params, "page"), DEFAULT_PAGE, "Page")
    limit = parse_positive_int(_first(params, "limit"), DEFAULT_LIMIT, "Limit", MAX_LIMIT)

    sort_by = _first(params, "sortBy") or DEFAULT_SORT_BY
    if sort_by not in SORT_COLUMNS:
        raise InvalidSortField(f"Invalid sort field. Must be one of: {', '.join(SORT_COLUMNS)}")
    sort_order = _first(params, "sortOrder") or DEFAULT_SORT_ORDER
    if sort_order not in SORT_ORDERS:
        raise InvalidSortOrder(f"Invalid sort order. Must be one of: {', '.join(SORT_ORDERS)}")

    query = BookingQuery(page=page, limit=limit)
    column = SORT_COLUMNS[sort_by]
    query.order_by = column.desc() if sort_order == "desc" else column.asc()

    if mode == SEARCH:
        term = _first(params, "q")
        if not term:
            raise SearchTermRequired()
        query.search_term = term
        query.conditions.append(search_condition(term))
        return query

    service_types = _values(params, "serviceType")
    car_types = _values(params, "carType")
    statuses = _values(params, "status")
    _check_choices(service_types, SERVICE_TYPES, "service type(s)")
    _check_choices(car_types, CAR_TYPES, "car type(s)")
    _check_choices(statuses, STATUSES, "status(es)")

    date_from_raw = _first(params, "dateFrom")
    date_to_raw = _first(params, "dateTo")
    date_from = parse_date(date_from_raw, "dateFrom") if date_from_raw else None
    date_to = parse_date(date_to_raw, "dateTo") if date_to_raw else None

    ratings = []
    min_price_raw = max_price_raw = None
    min_price = max_price = None
    if mode == FILTER:
        ratings = _values(params, "rating")
        _check_choices(ratings, VALID_RATINGS, "rating(s)")
        min_price_raw = _first(params, "minPrice")
        max_price_raw = _first(params, "maxPrice")
        min_price = parse_price(min_price_raw, "minPrice") if min_price_raw else None
        max_price = parse_price(max_price_raw, "maxPrice") if max_price_raw else None
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidPriceRange("minPrice cannot be greater than maxPrice")

    term = _first(params, "search") if mode == LIST else None

    if service_types:
        query.conditions.append(_equals(Booking.service_type, service_types))
    if car_types:
        query.conditions.append(_equals(Booking.car_type, car_types))
    if statuses:
        query.conditions.append(_equals(Booking.status, statuses))
    if date_from is not None:
        query.conditions.append(Booking.date >= date_from)
    if date_to is not None:
        query.conditions.append(Booking.date <= date_to)
    if min_price is not None:
        query.conditions.append(Booking.price >= min_price)
    if max_price is not None:
        query.conditions.append(Booking.price <= max_price)
    if ratings:
        query.conditions.append(_equals(Booking.rating, [int(r) for r in ratings]))
    if term:
        query.search_term = term
        query.conditions.append(search_condition(term))

    query.filters = {
        "serviceType": _echo(service_types),
        "carType": _echo(car_types),
        "status": _echo(statuses),
        "dateFrom": date_from_raw,
        "dateTo": date_to_raw,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }
    if mode == FILTER:
        query.filters.update({
            "minPrice": min_price_raw,
            "maxPrice": max_price_raw,
            "rating": _echo(ratings),
        })
    return query
