from pydantic import Field

from mallpark.schemas.common import BaseSchema
from mallpark.utils.constants import RateClass, SlotStatus


class SlotCreate(BaseSchema):
    id: int
    size: RateClass
    distances: list[int] = Field(min_length=1)


class SlotResponse(BaseSchema):
    id: int
    size: RateClass
    distances: list[int]
    status: SlotStatus


class ParkedVehicle(BaseSchema):
    license_plate: str
    size: RateClass
    slot_id: int
    ticket_number: str


class ComplexStatus(BaseSchema):
    entry_points: int
    parking_slots: int
    parked_vehicles: int
    available_slots: int
    available_by_size: dict[RateClass, int]
