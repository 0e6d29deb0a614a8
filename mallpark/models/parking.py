from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mallpark.models.base import BaseModel
from mallpark.utils.constants import RateClass, SlotStatus


class EntryPoint(BaseModel):
    __tablename__ = "entry_points"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)

    # Relationships
    sessions: Mapped[list["ParkingSession"]] = relationship(back_populates="entry_point")  # noqa: F821


class ParkingSlot(BaseModel):
    __tablename__ = "parking_slots"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    size: Mapped[RateClass] = mapped_column(index=True)
    distances: Mapped[list[int]] = mapped_column(JSON)
    status: Mapped[SlotStatus] = mapped_column(default=SlotStatus.AVAILABLE)

    # Relationships
    sessions: Mapped[list["ParkingSession"]] = relationship(back_populates="slot")  # noqa: F821

    @property
    def is_available(self) -> bool:
        return self.status == SlotStatus.AVAILABLE

    def distance_from(self, entry_point_id: int) -> int:
        if entry_point_id < 0 or entry_point_id >= len(self.distances):
            raise IndexError(f"Entry point {entry_point_id} is out of range for slot {self.id}")
        return self.distances[entry_point_id]
