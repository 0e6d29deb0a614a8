from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest
from loguru import logger
from sqlalchemy.orm import Session

from mallpark.core import logger as logger_module
from mallpark.database import create_db_engine, init_db, make_session_factory
from mallpark.main import setup_default_complex
from mallpark.schemas.rates import RateSchedule
from mallpark.schemas.session import SessionRecord
from mallpark.services.fee import get_rate_schedule
from mallpark.utils.constants import RateClass


@pytest.fixture(autouse=True)
def disable_logger(monkeypatch: pytest.MonkeyPatch):
    logger.remove()
    logger.add(lambda msg: None)
    monkeypatch.setattr(logger_module, "_LOGGER_CONFIGURED", True)
    yield


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    engine = create_db_engine("sqlite://")
    init_db(engine)
    session = make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def parking_complex(db_session: Session) -> Session:
    """Three entry points and two slots of each size."""
    setup_default_complex(db_session)
    db_session.commit()
    return db_session


@pytest.fixture
def schedule() -> RateSchedule:
    return get_rate_schedule()


@pytest.fixture
def start() -> datetime:
    return datetime(2024, 5, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def make_record(start: datetime) -> Callable[..., SessionRecord]:
    def _make(
        rate_class: RateClass = RateClass.SMALL,
        duration: timedelta = timedelta(hours=1),
        offset: timedelta = timedelta(),
        vehicle_id: int | str = "ABC123",
    ) -> SessionRecord:
        entry = start + offset
        return SessionRecord(
            vehicle_id=vehicle_id,
            rate_class=rate_class,
            entry_time=entry,
            exit_time=entry + duration,
        )

    return _make
