"""Request schemas for bookings.

Pydantic collects every failing field in one pass, so a single request
reports all of its problems together.
"""

import datetime as dt
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ValidationInfo, field_validator, validate_email

from services import ADD_ONS, CAR_TYPES, COMPLETED, SERVICE_TYPES, STATUSES, TIME_SLOTS, DEFAULT_STATUS

MIN_YEAR = 1900
CHANNELS = ("email", "whatsapp")
RATING_REQUIRES_COMPLETED = "Rating can only be set for completed bookings"


def _max_year() -> int:
    return date.today().year + 1


def _clean_name(v: str) -> str:
    v = v.strip()
    if not 2 <= len(v) <= 100:
        raise ValueError("Customer name must be between 2 and 100 characters")
    return v


def _clean_car_text(v: str, label: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"Car {label} is required")
    if len(v) > 50:
        raise ValueError(f"Car {label} cannot exceed 50 characters")
    return v


def _check_year(v: int) -> int:
    if not MIN_YEAR <= v <= _max_year():
        raise ValueError(f"Car year must be between {MIN_YEAR} and {_max_year()}")
    return v


def _check_choice(v: str, choices, label: str) -> str:
    if v not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return v


def _check_date(v: date) -> date:
    if v < date.today():
        raise ValueError("Booking date cannot be in the past")
    return v


def _check_rating(v: Optional[int]) -> Optional[int]:
    if v is not None and not 1 <= v <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return v


def _clean_add_ons(v: list[str]) -> list[str]:
    invalid = [a for a in v if a not in ADD_ONS]
    if invalid:
        raise ValueError(f"Invalid add-ons: {', '.join(invalid)}")
    # collapse duplicates, keep first occurrence order
    return list(dict.fromkeys(v))


class CarDetails(BaseModel):
    make: str
    model: str
    year: int
    type: str

    @field_validator("make")
    @classmethod
    def validate_make(cls, v):
        return _clean_car_text(v, "make")

    @field_validator("model")
    @classmethod
    def validate_model(cls, v):
        return _clean_car_text(v, "model")

    @field_validator("year")
    @classmethod
    def validate_year(cls, v):
        return _check_year(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _check_choice(v, CAR_TYPES, "Car type")


class CarDetailsUpdate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    type: Optional[str] = None

    @field_validator("make")
    @classmethod
    def validate_make(cls, v):
        return v if v is None else _clean_car_text(v, "make")

    @field_validator("model")
    @classmethod
    def validate_model(cls, v):
        return v if v is None else _clean_car_text(v, "model")

    @field_validator("year")
    @classmethod
    def validate_year(cls, v):
        return v if v is None else _check_year(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return v if v is None else _check_choice(v, CAR_TYPES, "Car type")


class BookingCreate(BaseModel):
    """Schema for creating a booking. Client-supplied price and duration are ignored."""

    customerName: str
    carDetails: CarDetails
    serviceType: str
    date: dt.date
    timeSlot: str
    status: str = DEFAULT_STATUS
    rating: Optional[int] = None
    addOns: list[str] = []

    @field_validator("customerName")
    @classmethod
    def validate_customer_name(cls, v):
        return _clean_name(v)

    @field_validator("serviceType")
    @classmethod
    def validate_service_type(cls, v):
        return _check_choice(v, SERVICE_TYPES, "Service type")

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_date(v)

    @field_validator("timeSlot")
    @classmethod
    def validate_time_slot(cls, v):
        return _check_choice(v, TIME_SLOTS, "Time slot")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_choice(v, STATUSES, "Status")

    # status is declared first, so it is in info.data unless it failed itself
    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v, info: ValidationInfo):
        v = _check_rating(v)
        if v is not None and info.data.get("status", COMPLETED) != COMPLETED:
            raise ValueError(RATING_REQUIRES_COMPLETED)
        return v

    @field_validator("addOns")
    @classmethod
    def validate_add_ons(cls, v):
        return _clean_add_ons(v)


class BookingUpdate(BaseModel):
    """Schema for a partial update; only the fields sent are applied."""

    customerName: Optional[str] = None
    carDetails: Optional[CarDetailsUpdate] = None
    serviceType: Optional[str] = None
    date: Optional[dt.date] = None
    timeSlot: Optional[str] = None
    status: Optional[str] = None
    rating: Optional[int] = None
    addOns: Optional[list[str]] = None

    @field_validator("customerName")
    @classmethod
    def validate_customer_name(cls, v):
        return v if v is None else _clean_name(v)

    @field_validator("serviceType")
    @classmethod
    def validate_service_type(cls, v):
        return v if v is None else _check_choice(v, SERVICE_TYPES, "Service type")

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return v if v is None else _check_date(v)

    @field_validator("timeSlot")
    @classmethod
    def validate_time_slot(cls, v):
        return v if v is None else _check_choice(v, TIME_SLOTS, "Time slot")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return v if v is None else _check_choice(v, STATUSES, "Status")

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v):
        return _check_rating(v)

    @field_validator("addOns")
    @classmethod
    def validate_add_ons(cls, v):
        return v if v is None else _clean_add_ons(v)


class RatingUpdate(BaseModel):
    # checked by the rate operation so a bad value maps to INVALID_RATING
    rating: Any = None


class ShareRequest(BaseModel):
    channel: str
    recipient: str

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v):
        return _check_choice(v.strip().lower(), CHANNELS, "Channel")

    @field_validator("recipient")
    @classmethod
    def validate_recipient(cls, v, info: ValidationInfo):
        v = v.strip()
        if not v:
            raise ValueError("Recipient is required")
        if info.data.get("channel") == "email":
            _, v = validate_email(v)
        return v


def error_details(errors) -> list[dict]:
    """Flatten pydantic errors into [{field, message}] with dotted field paths."""
    details = []
    for e in errors:
        loc = [str(p) for p in e.get("loc", ()) if p != "body"]
        message = e.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc), "message": message})
    return details
