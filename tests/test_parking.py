import pytest
from sqlalchemy.orm import Session

from mallpark.core.exceptions import ConflictError, NotFoundError, ValidationError
from mallpark.schemas.parking import SlotCreate
from mallpark.services import parking as parking_service
from mallpark.utils.constants import RateClass, SlotStatus


def occupy(db: Session, *slot_ids: int) -> None:
    """Mark slots as taken without going through a ticket."""
    for slot_id in slot_ids:
        parking_service.get_slot(db, slot_id).status = SlotStatus.OCCUPIED
    db.flush()


def test_default_complex_status(parking_complex: Session):
    status = parking_service.get_complex_status(parking_complex)
    assert status.entry_points == 3
    assert status.parking_slots == 6
    assert status.parked_vehicles == 0
    assert status.available_slots == 6
    assert status.available_by_size == {
        RateClass.SMALL: 2,
        RateClass.MEDIUM: 2,
        RateClass.LARGE: 2,
    }


def test_setup_requires_three_entry_points(db_session: Session):
    slots = [SlotCreate(id=1, size=RateClass.SMALL, distances=[1, 2])]
    with pytest.raises(ValidationError):
        parking_service.setup_complex(db_session, 2, slots)


def test_setup_requires_slots(db_session: Session):
    with pytest.raises(ValidationError):
        parking_service.setup_complex(db_session, 3, [])


def test_setup_rejects_duplicate_slot_ids(db_session: Session):
    slots = [
        SlotCreate(id=1, size=RateClass.SMALL, distances=[1, 2, 3]),
        SlotCreate(id=1, size=RateClass.LARGE, distances=[3, 2, 1]),
    ]
    with pytest.raises(ValidationError):
        parking_service.setup_complex(db_session, 3, slots)


def test_setup_requires_a_distance_per_entry_point(db_session: Session):
    slots = [SlotCreate(id=1, size=RateClass.SMALL, distances=[1, 2])]
    with pytest.raises(ValidationError):
        parking_service.setup_complex(db_session, 3, slots)


def test_setup_runs_once(parking_complex: Session):
    slots = [SlotCreate(id=10, size=RateClass.SMALL, distances=[1, 2, 3])]
    with pytest.raises(ConflictError):
        parking_service.setup_complex(parking_complex, 3, slots)


def test_add_slot(parking_complex: Session):
    slot = parking_service.add_slot(
        parking_complex, SlotCreate(id=7, size=RateClass.MEDIUM, distances=[9, 9, 0])
    )
    assert slot.status == SlotStatus.AVAILABLE
    assert len(parking_service.list_slots(parking_complex, size=RateClass.MEDIUM)) == 3

    with pytest.raises(ConflictError):
        parking_service.add_slot(
            parking_complex, SlotCreate(id=7, size=RateClass.SMALL, distances=[1, 1, 1])
        )
    with pytest.raises(ValidationError):
        parking_service.add_slot(
            parking_complex, SlotCreate(id=8, size=RateClass.SMALL, distances=[1, 1])
        )


@pytest.mark.parametrize(
    "vehicle_size,slot_size,expected",
    [
        (RateClass.SMALL, RateClass.SMALL, True),
        (RateClass.SMALL, RateClass.MEDIUM, True),
        (RateClass.SMALL, RateClass.LARGE, True),
        (RateClass.MEDIUM, RateClass.SMALL, False),
        (RateClass.MEDIUM, RateClass.MEDIUM, True),
        (RateClass.MEDIUM, RateClass.LARGE, True),
        (RateClass.LARGE, RateClass.SMALL, False),
        (RateClass.LARGE, RateClass.MEDIUM, False),
        (RateClass.LARGE, RateClass.LARGE, True),
    ],
)
def test_compatibility(vehicle_size, slot_size, expected):
    assert parking_service.is_compatible(vehicle_size, slot_size) is expected


@pytest.mark.parametrize(
    "vehicle_size,entry_point_id,expected_slot",
    [
        (RateClass.SMALL, 0, 1),
        (RateClass.SMALL, 1, 5),
        (RateClass.SMALL, 2, 6),
        (RateClass.MEDIUM, 0, 3),
        (RateClass.MEDIUM, 1, 5),
        (RateClass.LARGE, 0, 5),
        (RateClass.LARGE, 2, 6),
    ],
)
def test_find_nearest_slot(parking_complex: Session, vehicle_size, entry_point_id, expected_slot):
    slot = parking_service.find_slot(parking_complex, vehicle_size, entry_point_id)
    assert slot.id == expected_slot


def test_find_slot_skips_occupied(parking_complex: Session):
    occupy(parking_complex, 1, 2)
    slot = parking_service.find_slot(parking_complex, RateClass.SMALL, 0)
    assert slot.id == 3


def test_find_slot_tie_breaks_on_id(parking_complex: Session):
    parking_service.add_slot(
        parking_complex, SlotCreate(id=0, size=RateClass.LARGE, distances=[6, 1, 5])
    )
    slot = parking_service.find_slot(parking_complex, RateClass.LARGE, 1)
    assert slot.id == 0


def test_find_slot_none_available(parking_complex: Session):
    occupy(parking_complex, 5, 6)
    assert parking_service.find_slot(parking_complex, RateClass.LARGE, 0) is None


def test_find_slot_unknown_entry_point(parking_complex: Session):
    with pytest.raises(NotFoundError):
        parking_service.find_slot(parking_complex, RateClass.SMALL, 9)


def test_list_slots_filtered(parking_complex: Session):
    slots = parking_service.list_slots(parking_complex, size=RateClass.LARGE)
    assert [s.id for s in slots] == [5, 6]
