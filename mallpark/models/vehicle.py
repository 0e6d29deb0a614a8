from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mallpark.models.base import BaseModel
from mallpark.utils.constants import RateClass


class Vehicle(BaseModel):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True)
    license_plate: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    size: Mapped[RateClass]

    # Relationships
    sessions: Mapped[list["ParkingSession"]] = relationship(  # noqa: F821
        back_populates="vehicle", order_by="ParkingSession.entry_time"
    )
