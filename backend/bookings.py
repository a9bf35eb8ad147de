import logging
import re
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from errors import (
    BookingNotCompleted,
    BookingNotFound,
    BookingValidationError,
    InvalidIdFormat,
    InvalidRating,
)
from models import Booking, utcnow
from queries import BookingQuery, FILTER, LIST, SEARCH, build_query
from schemas import RATING_REQUIRES_COMPLETED, BookingCreate, BookingUpdate
from services import (
    CAR_TYPES,
    COMPLETED,
    RATINGS,
    SERVICE_TYPES,
    SORT_OPTIONS,
    STATUSES,
    calculate_total_price,
    get_service_duration,
)

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def validate_booking_id(booking_id: str) -> str:
    if not ID_PATTERN.fullmatch(booking_id or ""):
        raise InvalidIdFormat()
    return booking_id.lower()


def validate_transition(current: str, new: str) -> None:
    """Hook for status transition rules. Every transition is currently allowed."""
    return None


def ensure_rating_allowed(status: str, rating: Optional[int]) -> None:
    if rating is not None and status != COMPLETED:
        raise BookingValidationError(details=[{"field": "rating", "message": RATING_REQUIRES_COMPLETED}])


def _fetch(db: Session, booking_id: str) -> Booking:
    booking = db.get(Booking, validate_booking_id(booking_id))
    if booking is None:
        raise BookingNotFound()
    return booking


def _run(db: Session, query: BookingQuery) -> tuple[list[dict], dict]:
    q = db.query(Booking)
    if query.where is not None:
        q = q.filter(query.where)
    total_count = q.order_by(None).count()
    if query.skip >= total_count:
        return [], query.pagination(total_count)
    rows = q.order_by(*query.ordering).offset(query.skip).limit(query.take).all()
    return [b.to_dict() for b in rows], query.pagination(total_count)


# ================== OPERATIONS ==================
def create_booking(db: Session, payload: BookingCreate) -> dict:
    ensure_rating_allowed(payload.status, payload.rating)
    car = payload.carDetails
    booking = Booking(
        customer_name=payload.customerName,
        car_make=car.make,
        car_model=car.model,
        car_year=car.year,
        car_type=car.type,
        service_type=payload.serviceType,
        date=payload.date,
        time_slot=payload.timeSlot,
        duration=get_service_duration(payload.serviceType),
        price=calculate_total_price(payload.serviceType, payload.addOns),
        status=payload.status,
        rating=payload.rating,
        add_ons=list(payload.addOns),
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking created: %s for %s on %s %s", booking.id, booking.customer_name,
                booking.date, booking.time_slot)
    return booking.to_dict()


def get_booking(db: Session, booking_id: str) -> dict:
    return _fetch(db, booking_id).to_dict()


def list_bookings(db: Session, params) -> dict:
    query = build_query(params, LIST)
    data, pagination = _run(db, query)
    return {"data": data, "pagination": pagination}


def search_bookings(db: Session, params) -> dict:
    query = build_query(params, SEARCH)
    data, pagination = _run(db, query)
    return {"data": data, "searchTerm": query.search_term, "pagination": pagination}


def filter_bookings(db: Session, params) -> dict:
    query = build_query(params, FILTER)
    data, pagination = _run(db, query)
    return {"data": data, "filters": query.filters, "pagination": pagination}


def update_booking(db: Session, booking_id: str, payload: BookingUpdate) -> dict:
    booking = _fetch(db, booking_id)
    changes = payload.model_dump(exclude_unset=True)

    status = changes.get("status") or booking.status
    if "status" in changes and changes["status"] is not None and changes["status"] != booking.status:
        validate_transition(booking.status, changes["status"])
    rating = changes["rating"] if "rating" in changes else booking.rating
    ensure_rating_allowed(status, rating)

    car = changes.get("carDetails") or {}
    for key, column in (("make", "car_make"), ("model", "car_model"), ("year", "car_year"), ("type", "car_type")):
        if car.get(key) is not None:
            setattr(booking, column, car[key])

    simple = {
        "customerName": "customer_name",
        "date": "date",
        "timeSlot": "time_slot",
        "serviceType": "service_type",
    }
    for key, column in simple.items():
        if changes.get(key) is not None:
            setattr(booking, column, changes[key])
    booking.status = status
    booking.rating = rating
    if changes.get("addOns") is not None:
        booking.add_ons = list(changes["addOns"])

    if changes.get("serviceType") is not None or changes.get("addOns") is not None:
        booking.price = calculate_total_price(booking.service_type, booking.add_ons)
        booking.duration = get_service_duration(booking.service_type)
    booking.updated_at = utcnow()

    db.commit()
    db.refresh(booking)
    logger.info("Booking updated: %s (%s)", booking.id, ", ".join(sorted(changes)) or "no changes")
    return booking.to_dict()


def delete_booking(db: Session, booking_id: str) -> dict:
    booking = _fetch(db, booking_id)
    deleted_id = booking.id
    db.delete(booking)
    db.commit()
    logger.info("Booking deleted: %s", deleted_id)
    return {"id": deleted_id}


def rate_booking(db: Session, booking_id: str, rating) -> dict:
    booking_id = validate_booking_id(booking_id)
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating()
    booking = _fetch(db, booking_id)
    if booking.status != COMPLETED:
        raise BookingNotCompleted()
    booking.rating = rating
    booking.updated_at = utcnow()
    db.commit()
    db.refresh(booking)
    logger.info("Booking rated: %s -> %s", booking.id, rating)
    return booking.to_dict()


def _distribution(db: Session, column) -> list[dict]:
    rows = (
        db.query(column, func.count(Booking.id))
        .group_by(column)
        .order_by(func.count(Booking.id).desc(), column)
        .all()
    )
    return [{"value": value, "count": count} for value, count in rows]


def booking_stats(db: Session) -> dict:
    total = db.query(func.count(Booking.id)).scalar() or 0
    avg_price, min_price, max_price = db.query(
        func.avg(Booking.price), func.min(Booking.price), func.max(Booking.price)
    ).one()
    return {
        "totalBookings": total,
        "statusDistribution": _distribution(db, Booking.status),
        "serviceTypeDistribution": _distribution(db, Booking.service_type),
        "carTypeDistribution": _distribution(db, Booking.car_type),
        "averagePrice": round(avg_price, 2) if avg_price is not None else 0,
        "priceRange": {
            "minPrice": min_price if min_price is not None else 0,
            "maxPrice": max_price if max_price is not None else 0,
        },
        "availableFilters": {
            "serviceTypes": list(SERVICE_TYPES),
            "carTypes": list(CAR_TYPES),
            "statuses": list(STATUSES),
            "ratings": list(RATINGS),
            "sortOptions": list(SORT_OPTIONS),
        },
    }
