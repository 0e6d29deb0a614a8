from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mallpark.database import UTCDateTime
from mallpark.models.base import BaseModel
from mallpark.utils.constants import RateClass, SessionStatus


class ParkingSession(BaseModel):
    __tablename__ = "parking_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    ticket_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), index=True)
    slot_id: Mapped[int] = mapped_column(ForeignKey("parking_slots.id"))
    entry_point_id: Mapped[int] = mapped_column(ForeignKey("entry_points.id"))
    rate_class: Mapped[RateClass]
    entry_time: Mapped[datetime] = mapped_column(UTCDateTime)
    exit_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    fee: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[SessionStatus] = mapped_column(default=SessionStatus.ACTIVE)
    previous_session_id: Mapped[int | None] = mapped_column(
        ForeignKey("parking_sessions.id"), nullable=True
    )

    # Relationships
    vehicle: Mapped["Vehicle"] = relationship(back_populates="sessions")  # noqa: F821
    slot: Mapped["ParkingSlot"] = relationship(back_populates="sessions")  # noqa: F821
    entry_point: Mapped["EntryPoint"] = relationship(back_populates="sessions")  # noqa: F821
    previous_session: Mapped["ParkingSession | None"] = relationship(remote_side=[id])

    @property
    def is_active(self) -> bool:
        return self.exit_time is None
