from types import MappingProxyType

# ================== SERVICES ==================
SERVICE_PRICING = MappingProxyType({
    "Basic Wash": MappingProxyType({"basePrice": 15, "duration": 30}),
    "Deluxe Wash": MappingProxyType({"basePrice": 25, "duration": 60}),
    "Full Detailing": MappingProxyType({"basePrice": 50, "duration": 120}),
})

# ================== ADD-ONS ==================
ADD_ON_PRICING = MappingProxyType({
    "Interior Cleaning": 10,
    "Polishing": 15,
    "Wax Protection": 20,
    "Tire Shine": 5,
    "Air Freshener": 3,
})

TIME_SLOTS = (
    "09:00-10:00",
    "10:00-11:00",
    "11:00-12:00",
    "12:00-13:00",
    "13:00-14:00",
    "14:00-15:00",
    "15:00-16:00",
    "16:00-17:00",
)

SERVICE_TYPES = tuple(SERVICE_PRICING)
ADD_ONS = tuple(ADD_ON_PRICING)
CAR_TYPES = ("sedan", "SUV", "hatchback", "luxury", "truck", "coupe")
STATUSES = ("Pending", "Confirmed", "In Progress", "Completed", "Cancelled")
RATINGS = (1, 2, 3, 4, 5)
SORT_OPTIONS = ("newest", "price", "duration", "status", "date", "rating")

DEFAULT_STATUS = "Pending"
COMPLETED = "Completed"
MIN_DURATION = 30
MAX_DURATION = 480


def calculate_total_price(service_type: str, add_ons=()) -> float:
    """Base price of the service plus every add-on; unknown names count as 0."""
    service = SERVICE_PRICING.get(service_type)
    base = service["basePrice"] if service else 0
    return base + sum(ADD_ON_PRICING.get(a, 0) for a in add_ons)


def get_service_duration(service_type: str) -> int:
    service = SERVICE_PRICING.get(service_type)
    return service["duration"] if service else 0


def catalog() -> dict:
    return {
        "services": {name: dict(info) for name, info in SERVICE_PRICING.items()},
        "addOns": dict(ADD_ON_PRICING),
        "timeSlots": list(TIME_SLOTS),
        "carTypes": list(CAR_TYPES),
        "statuses": list(STATUSES),
    }
