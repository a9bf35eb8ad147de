import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Float, String, Date, DateTime, JSON
from database import Base


def new_booking_id() -> str:
    return uuid.uuid4().hex[:24]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(24), primary_key=True, default=new_booking_id)
    customer_name = Column(String(100), nullable=False, index=True)
    car_make = Column(String(50), nullable=False)
    car_model = Column(String(50), nullable=False)
    car_year = Column(Integer, nullable=False)
    car_type = Column(String(20), nullable=False, index=True)
    service_type = Column(String(30), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(11), nullable=False)
    duration = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="Pending", index=True)
    rating = Column(Integer, nullable=True)
    add_ons = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "carDetails": {
                "make": self.car_make,
                "model": self.car_model,
                "year": self.car_year,
                "type": self.car_type,
            },
            "serviceType": self.service_type,
            "date": self.date.isoformat() if self.date else None,
            "timeSlot": self.time_slot,
            "duration": self.duration,
            "price": self.price,
            "status": self.status,
            "rating": self.rating,
            "addOns": list(self.add_ons or []),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
