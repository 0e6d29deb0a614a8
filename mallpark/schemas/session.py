from datetime import datetime

from pydantic import ConfigDict, field_validator, model_validator

from mallpark.schemas.common import BaseSchema, TimestampSchema
from mallpark.utils.constants import RateClass, SessionStatus
from mallpark.utils.datetime_utils import ensure_utc


class SessionRecord(BaseSchema):
    """The slice of a ticket the fee engine reads."""

    model_config = ConfigDict(frozen=True)

    vehicle_id: int | str
    rate_class: RateClass
    entry_time: datetime
    exit_time: datetime | None = None

    @field_validator("entry_time", "exit_time")
    @classmethod
    def validate_utc(cls, v: datetime | None) -> datetime | None:
        return None if v is None else ensure_utc(v)

    @model_validator(mode="after")
    def validate_exit_after_entry(self) -> "SessionRecord":
        if self.exit_time is not None and self.exit_time < self.entry_time:
            raise ValueError("Exit time cannot be before entry time")
        return self

    @property
    def is_active(self) -> bool:
        return self.exit_time is None


class ParkRequest(BaseSchema):
    license_plate: str
    vehicle_size: RateClass
    entry_point_id: int

    @field_validator("license_plate")
    @classmethod
    def validate_license_plate(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("License plate cannot be empty")
        if len(v) > 20:
            raise ValueError("License plate cannot exceed 20 characters")
        return v.upper()


class SessionResponse(TimestampSchema):
    id: int
    ticket_number: str
    vehicle_id: int
    license_plate: str
    vehicle_size: RateClass
    slot_id: int
    entry_point_id: int
    rate_class: RateClass
    entry_time: datetime
    exit_time: datetime | None = None
    duration_hours: int | None = None
    fee: int | None = None
    status: SessionStatus
    previous_session_id: int | None = None
    previous_ticket_number: str | None = None


class SegmentFee(BaseSchema):
    sessions: list[SessionRecord]
    parked_seconds: int
    billed_hours: int
    days: int
    hours_by_class: dict[RateClass, int]
    fee: int

    @property
    def is_mixed(self) -> bool:
        return len(self.hours_by_class) > 1


class VehicleBilling(BaseSchema):
    license_plate: str
    sessions: list[SessionResponse]
    segments: list[SegmentFee]
    continuous_fee: int
    charged_fee: int
