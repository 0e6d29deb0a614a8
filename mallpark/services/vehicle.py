from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from mallpark.core.exceptions import ValidationError
from mallpark.models.session import ParkingSession
from mallpark.models.vehicle import Vehicle
from mallpark.schemas.parking import ParkedVehicle
from mallpark.utils.constants import RateClass, SessionStatus


def get_vehicle_by_plate(db: Session, license_plate: str) -> Vehicle | None:
    result = db.execute(select(Vehicle).where(Vehicle.license_plate == license_plate.upper()))
    return result.scalar_one_or_none()


def get_or_create_vehicle(db: Session, license_plate: str, size: RateClass) -> Vehicle:
    vehicle = get_vehicle_by_plate(db, license_plate)
    if vehicle:
        if vehicle.size != size:
            raise ValidationError(
                f"Vehicle {vehicle.license_plate} is registered as {vehicle.size.value}, not {size.value}"
            )
        return vehicle

    vehicle = Vehicle(license_plate=license_plate.upper(), size=size)
    db.add(vehicle)
    db.flush()
    return vehicle


def list_parked_vehicles(db: Session) -> list[ParkedVehicle]:
    result = db.execute(
        select(ParkingSession)
        .where(ParkingSession.status == SessionStatus.ACTIVE)
        .options(joinedload(ParkingSession.vehicle))
        .order_by(ParkingSession.entry_time)
    )
    return [
        ParkedVehicle(
            license_plate=s.vehicle.license_plate,
            size=s.vehicle.size,
            slot_id=s.slot_id,
            ticket_number=s.ticket_number,
        )
        for s in result.scalars().all()
    ]
