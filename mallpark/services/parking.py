from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from mallpark.core.exceptions import ConflictError, NotFoundError, ValidationError
from mallpark.models.parking import EntryPoint, ParkingSlot
from mallpark.models.session import ParkingSession
from mallpark.schemas.parking import ComplexStatus, SlotCreate, SlotResponse
from mallpark.utils.constants import (
    MIN_ENTRY_POINTS,
    VEHICLE_SLOT_COMPATIBILITY,
    RateClass,
    SessionStatus,
    SlotStatus,
)


def is_compatible(vehicle_size: RateClass, slot_size: RateClass) -> bool:
    return slot_size in VEHICLE_SLOT_COMPATIBILITY[vehicle_size]


def _validate_distances(data: SlotCreate, entry_point_count: int) -> None:
    if len(data.distances) != entry_point_count:
        raise ValidationError(
            f"Parking slot {data.id} has {len(data.distances)} distances, "
            f"but there are {entry_point_count} entry points"
        )
    if any(d < 0 for d in data.distances):
        raise ValidationError(f"Parking slot {data.id} has a negative distance")


def setup_complex(db: Session, entry_point_count: int, slots: list[SlotCreate]) -> ComplexStatus:
    if entry_point_count < MIN_ENTRY_POINTS:
        raise ValidationError(f"There must be at least {MIN_ENTRY_POINTS} entry points")
    if not slots:
        raise ValidationError("Parking slots cannot be empty")

    slot_ids = [s.id for s in slots]
    if len(set(slot_ids)) != len(slot_ids):
        raise ValidationError("Parking slots must have unique IDs")
    for data in slots:
        _validate_distances(data, entry_point_count)

    result = db.execute(select(func.count(EntryPoint.id)))
    if result.scalar():
        raise ConflictError("Parking complex is already set up")

    db.add_all(EntryPoint(id=i) for i in range(entry_point_count))
    db.add_all(ParkingSlot(**data.model_dump()) for data in slots)
    db.flush()

    logger.info(f"Parking complex ready: {entry_point_count} entry points, {len(slots)} slots")
    return get_complex_status(db)


def count_entry_points(db: Session) -> int:
    result = db.execute(select(func.count(EntryPoint.id)))
    return result.scalar() or 0


def get_entry_point(db: Session, entry_point_id: int) -> EntryPoint:
    entry_point = db.get(EntryPoint, entry_point_id)
    if not entry_point:
        raise NotFoundError(f"Entry point not found: {entry_point_id}")
    return entry_point


def get_slot(db: Session, slot_id: int) -> ParkingSlot:
    slot = db.get(ParkingSlot, slot_id)
    if not slot:
        raise NotFoundError(f"Parking slot not found: {slot_id}")
    return slot


def add_slot(db: Session, data: SlotCreate) -> SlotResponse:
    _validate_distances(data, count_entry_points(db))
    if db.get(ParkingSlot, data.id):
        raise ConflictError(f"Parking slot with ID {data.id} already exists")

    slot = ParkingSlot(**data.model_dump())
    db.add(slot)
    db.flush()
    logger.info(f"Added {slot.size.value} slot {slot.id}")
    return SlotResponse.model_validate(slot)


def list_slots(db: Session, size: RateClass | None = None) -> list[SlotResponse]:
    query = select(ParkingSlot).order_by(ParkingSlot.id)
    if size:
        query = query.where(ParkingSlot.size == size)
    result = db.execute(query)
    return [SlotResponse.model_validate(slot) for slot in result.scalars().all()]


def get_available_slots(db: Session, size: RateClass | None = None) -> list[ParkingSlot]:
    query = (
        select(ParkingSlot)
        .where(ParkingSlot.status == SlotStatus.AVAILABLE)
        .order_by(ParkingSlot.id)
    )
    if size:
        query = query.where(ParkingSlot.size == size)
    result = db.execute(query)
    return list(result.scalars().all())


def find_slot(db: Session, vehicle_size: RateClass, entry_point_id: int) -> ParkingSlot | None:
    """Nearest available slot the vehicle fits in; ties go to the lower slot id."""
    entry_point = get_entry_point(db, entry_point_id)
    candidates = [
        slot for slot in get_available_slots(db) if is_compatible(vehicle_size, slot.size)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda slot: (slot.distance_from(entry_point.id), slot.id))


def get_complex_status(db: Session) -> ComplexStatus:
    slot_count = db.execute(select(func.count(ParkingSlot.id))).scalar() or 0
    parked = (
        db.execute(
            select(func.count(ParkingSession.id)).where(
                ParkingSession.status == SessionStatus.ACTIVE
            )
        ).scalar()
        or 0
    )
    available = get_available_slots(db)
    return ComplexStatus(
        entry_points=count_entry_points(db),
        parking_slots=slot_count,
        parked_vehicles=parked,
        available_slots=len(available),
        available_by_size={
            size: sum(1 for slot in available if slot.size == size) for size in RateClass
        },
    )
