import pytest

from services import (
    ADD_ON_PRICING,
    SERVICE_PRICING,
    TIME_SLOTS,
    calculate_total_price,
    catalog,
    get_service_duration,
)


def test_deluxe_with_add_ons():
    assert calculate_total_price("Deluxe Wash", ["Interior Cleaning", "Tire Shine"]) == 40


@pytest.mark.parametrize("service, base", [("Basic Wash", 15), ("Deluxe Wash", 25), ("Full Detailing", 50)])
def test_base_price_without_add_ons(service, base):
    assert calculate_total_price(service, []) == base


def test_every_add_on_adds_its_price():
    total = calculate_total_price("Full Detailing", list(ADD_ON_PRICING))
    assert total == 50 + 10 + 15 + 20 + 5 + 3


def test_unknown_names_contribute_nothing():
    assert calculate_total_price("Basic Wash", ["Rocket Boost"]) == 15
    assert calculate_total_price("Moon Wash", ["Polishing"]) == 15


@pytest.mark.parametrize("service, minutes", [("Basic Wash", 30), ("Deluxe Wash", 60), ("Full Detailing", 120)])
def test_service_duration(service, minutes):
    assert get_service_duration(service) == minutes


def test_unknown_service_duration():
    assert get_service_duration("Moon Wash") == 0


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        SERVICE_PRICING["Basic Wash"] = {"basePrice": 0, "duration": 0}
    with pytest.raises(TypeError):
        ADD_ON_PRICING["Polishing"] = 0


def test_time_slots_cover_the_working_day():
    assert TIME_SLOTS[0] == "09:00-10:00"
    assert TIME_SLOTS[-1] == "16:00-17:00"
    assert len(TIME_SLOTS) == 8


def test_catalog_is_plain_data():
    data = catalog()
    assert data["services"]["Basic Wash"] == {"basePrice": 15, "duration": 30}
    data["addOns"]["Polishing"] = 0
    assert ADD_ON_PRICING["Polishing"] == 15
