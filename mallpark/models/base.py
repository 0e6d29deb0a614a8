from datetime import UTC, datetime

from sqlalchemy.orm import Mapped, mapped_column

from mallpark.database import Base, UTCDateTime


def utcnow() -> datetime:
    return datetime.now(UTC)


class BaseModel(Base):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
