from datetime import date

from models import Booking
from seed import SAMPLE_BOOKINGS, sample_payloads, seed


def test_sample_payloads_are_valid_and_upcoming():
    today = date.today()
    payloads = sample_payloads(today)
    assert len(payloads) == len(SAMPLE_BOOKINGS)
    assert all(p.date >= today for p in payloads)


def test_seed_computes_prices(db):
    assert seed(db) == len(SAMPLE_BOOKINGS)
    rows = {b.customer_name: b for b in db.query(Booking).all()}
    assert rows["Sarah Johnson"].price == 40
    assert rows["Michael Brown"].price == 88
    assert rows["Michael Brown"].duration == 120
    assert rows["John Smith"].rating == 5


def test_seed_clear_replaces_existing(db):
    seed(db)
    seed(db, clear=True)
    assert db.query(Booking).count() == len(SAMPLE_BOOKINGS)
