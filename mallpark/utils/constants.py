from enum import Enum


class RateClass(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


# Slot sizes each vehicle size may park in.
VEHICLE_SLOT_COMPATIBILITY: dict[RateClass, frozenset[RateClass]] = {
    RateClass.SMALL: frozenset({RateClass.SMALL, RateClass.MEDIUM, RateClass.LARGE}),
    RateClass.MEDIUM: frozenset({RateClass.MEDIUM, RateClass.LARGE}),
    RateClass.LARGE: frozenset({RateClass.LARGE}),
}

MIN_ENTRY_POINTS = 3

SECONDS_PER_HOUR = 3600

# (slot id, size, distances from entry points 0, 1, 2)
DEFAULT_SLOT_LAYOUT: list[tuple[int, RateClass, list[int]]] = [
    (1, RateClass.SMALL, [1, 5, 8]),
    (2, RateClass.SMALL, [2, 6, 9]),
    (3, RateClass.MEDIUM, [3, 2, 10]),
    (4, RateClass.MEDIUM, [4, 3, 7]),
    (5, RateClass.LARGE, [6, 1, 5]),
    (6, RateClass.LARGE, [7, 4, 2]),
]
