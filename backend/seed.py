"""
Populate the database with sample bookings.

Usage:
    python seed.py           add the sample bookings
    python seed.py --clear   delete every booking first
"""

import argparse
import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

import bookings
from config import configure_logging
from database import Base, SessionLocal, engine
from models import Booking
from schemas import BookingCreate

logger = logging.getLogger(__name__)

# (customer, (make, model, year, type), service, day offset, slot, status, rating, add-ons)
SAMPLE_BOOKINGS = [
    ("John Smith", ("Toyota", "Camry", 2020, "sedan"), "Basic Wash", 0, "09:00-10:00", "Completed", 5, []),
    ("Sarah Johnson", ("Honda", "CR-V", 2019, "SUV"), "Deluxe Wash", 1, "10:00-11:00", "Confirmed", None,
     ["Interior Cleaning", "Tire Shine"]),
    ("Michael Brown", ("BMW", "X5", 2021, "luxury"), "Full Detailing", 2, "14:00-15:00", "In Progress", None,
     ["Polishing", "Wax Protection", "Air Freshener"]),
    ("Emily Davis", ("Volkswagen", "Golf", 2018, "hatchback"), "Basic Wash", 3, "11:00-12:00", "Pending", None,
     ["Air Freshener"]),
    ("David Wilson", ("Ford", "F-150", 2022, "truck"), "Deluxe Wash", 4, "13:00-14:00", "Cancelled", None,
     ["Tire Shine"]),
    ("Lisa Anderson", ("Audi", "A5", 2020, "coupe"), "Full Detailing", 5, "15:00-16:00", "Pending", None,
     ["Interior Cleaning", "Polishing"]),
]


def sample_payloads(today: date) -> list[BookingCreate]:
    payloads = []
    for name, (make, model, year, car_type), service, offset, slot, status, rating, add_ons in SAMPLE_BOOKINGS:
        payloads.append(BookingCreate(
            customerName=name,
            carDetails={"make": make, "model": model, "year": year, "type": car_type},
            serviceType=service,
            date=today + timedelta(days=offset),
            timeSlot=slot,
            status=status,
            rating=rating,
            addOns=add_ons,
        ))
    return payloads


def seed(db: Session, clear: bool = False) -> int:
    if clear:
        removed = db.query(Booking).delete()
        db.commit()
        logger.info("Removed %d existing bookings", removed)
    created = [bookings.create_booking(db, payload) for payload in sample_payloads(date.today())]
    logger.info("Seeded %d bookings", len(created))
    return len(created)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the car wash booking database")
    parser.add_argument("--clear", action="store_true", help="delete existing bookings first")
    args = parser.parse_args()

    configure_logging()
    Base.metadata.create_all(engine)
    db = SessionLocal()
    try:
        seed(db, clear=args.clear)
    finally:
        db.close()


if __name__ == "__main__":
    main()
