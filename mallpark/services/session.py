import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from mallpark.core.exceptions import (
    ConflictError,
    NotFoundError,
    SpaceUnavailableError,
    ValidationError,
)
from mallpark.models.session import ParkingSession
from mallpark.schemas.session import ParkRequest, SessionRecord, SessionResponse, VehicleBilling
from mallpark.services import fee as fee_service
from mallpark.services import parking as parking_service
from mallpark.services import vehicle as vehicle_service
from mallpark.utils.constants import SessionStatus, SlotStatus
from mallpark.utils.datetime_utils import ensure_utc


def generate_ticket_number() -> str:
    return f"TKT-{uuid.uuid4().hex[:12].upper()}"


def _resolve_time(at: datetime | None) -> datetime:
    if at is None:
        return datetime.now(UTC)
    return ensure_utc(at)


def _session_query():
    return select(ParkingSession).options(
        joinedload(ParkingSession.vehicle),
        joinedload(ParkingSession.previous_session),
    )


def to_response(session: ParkingSession) -> SessionResponse:
    duration_hours = None
    if session.exit_time is not None:
        duration_hours = fee_service.billable_hours(
            fee_service.elapsed_seconds(session.entry_time, session.exit_time)
        )
    previous = session.previous_session
    return SessionResponse(
        id=session.id,
        ticket_number=session.ticket_number,
        vehicle_id=session.vehicle_id,
        license_plate=session.vehicle.license_plate,
        vehicle_size=session.vehicle.size,
        slot_id=session.slot_id,
        entry_point_id=session.entry_point_id,
        rate_class=session.rate_class,
        entry_time=session.entry_time,
        exit_time=session.exit_time,
        duration_hours=duration_hours,
        fee=session.fee,
        status=session.status,
        previous_session_id=session.previous_session_id,
        previous_ticket_number=previous.ticket_number if previous else None,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


def get_active_session(db: Session, license_plate: str) -> ParkingSession | None:
    vehicle = vehicle_service.get_vehicle_by_plate(db, license_plate)
    if not vehicle:
        return None
    result = db.execute(
        _session_query().where(
            ParkingSession.vehicle_id == vehicle.id,
            ParkingSession.status == SessionStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


def get_last_closed_session(db: Session, vehicle_id: int) -> ParkingSession | None:
    result = db.execute(
        select(ParkingSession)
        .where(
            ParkingSession.vehicle_id == vehicle_id,
            ParkingSession.status == SessionStatus.COMPLETED,
        )
        .order_by(ParkingSession.exit_time.desc(), ParkingSession.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def recently_exited(db: Session, license_plate: str, at: datetime | None = None) -> bool:
    vehicle = vehicle_service.get_vehicle_by_plate(db, license_plate)
    if not vehicle:
        return False
    last = get_last_closed_session(db, vehicle.id)
    if not last:
        return False
    return fee_service.is_continuous(last.exit_time, _resolve_time(at))


def park_vehicle(db: Session, data: ParkRequest, at: datetime | None = None) -> SessionResponse:
    entry_time = _resolve_time(at)
    vehicle = vehicle_service.get_or_create_vehicle(db, data.license_plate, data.vehicle_size)

    existing = get_active_session(db, vehicle.license_plate)
    if existing:
        raise ConflictError(
            f"Vehicle {vehicle.license_plate} is already parked (ticket: {existing.ticket_number})"
        )

    entry_point = parking_service.get_entry_point(db, data.entry_point_id)

    previous = get_last_closed_session(db, vehicle.id)
    if previous and entry_time < previous.exit_time:
        raise ValidationError("Entry time cannot be before the vehicle's last exit")

    slot = parking_service.find_slot(db, vehicle.size, entry_point.id)
    if not slot:
        raise SpaceUnavailableError(f"No available slot for {vehicle.size.value} vehicle")

    session = ParkingSession(
        ticket_number=generate_ticket_number(),
        vehicle_id=vehicle.id,
        slot_id=slot.id,
        entry_point_id=entry_point.id,
        rate_class=slot.size,
        entry_time=entry_time,
        status=SessionStatus.ACTIVE,
    )
    if previous and fee_service.is_continuous(previous.exit_time, entry_time):
        session.previous_session_id = previous.id
    db.add(session)
    slot.status = SlotStatus.OCCUPIED
    db.flush()

    logger.info(
        f"Parked {vehicle.license_plate} in {slot.size.value} slot {slot.id} "
        f"via entry point {entry_point.id} (ticket {session.ticket_number})"
    )
    if session.previous_session_id:
        logger.info(f"Ticket {session.ticket_number} continues ticket {previous.ticket_number}")

    return to_response(db.execute(_session_query().where(ParkingSession.id == session.id)).scalar_one())


def unpark_vehicle(db: Session, license_plate: str, at: datetime | None = None) -> SessionResponse:
    session = get_active_session(db, license_plate)
    if not session:
        raise NotFoundError(f"Vehicle {license_plate.upper()} is not parked")

    exit_time = _resolve_time(at)
    if exit_time < session.entry_time:
        raise ValidationError("Exit time cannot be before entry time")

    session.exit_time = exit_time
    session.fee = fee_service.compute_fee(SessionRecord.model_validate(session))
    session.status = SessionStatus.COMPLETED
    parking_service.get_slot(db, session.slot_id).status = SlotStatus.AVAILABLE
    db.flush()

    logger.info(
        f"Unparked {session.vehicle.license_plate} from slot {session.slot_id}, "
        f"fee {session.fee} (ticket {session.ticket_number})"
    )
    return to_response(session)


def get_session_history(db: Session, license_plate: str) -> list[SessionResponse]:
    vehicle = vehicle_service.get_vehicle_by_plate(db, license_plate)
    if not vehicle:
        raise NotFoundError(f"Vehicle not found: {license_plate.upper()}")
    result = db.execute(
        _session_query()
        .where(ParkingSession.vehicle_id == vehicle.id)
        .order_by(ParkingSession.entry_time, ParkingSession.id)
    )
    return [to_response(s) for s in result.scalars().all()]


def get_vehicle_billing(db: Session, license_plate: str) -> VehicleBilling:
    """Charged fees against the continuous-rate fee over the vehicle's closed tickets."""
    history = get_session_history(db, license_plate)
    closed = [SessionRecord.model_validate(s.model_dump()) for s in history if s.exit_time is not None]

    segments = fee_service.summarize_segments(closed) if closed else []
    continuous_fee = fee_service.compute_continuous_fee(closed) if closed else 0
    return VehicleBilling(
        license_plate=license_plate.upper(),
        sessions=history,
        segments=segments,
        continuous_fee=continuous_fee,
        charged_fee=sum(s.fee or 0 for s in history),
    )
