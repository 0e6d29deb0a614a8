"""Parking fee engine.

Pure functions over closed sessions and a read-only :class:`RateSchedule`.
Nothing here reads the clock, touches the database or logs; every instant
comes in as an argument, so the functions are safe to call from any thread.

A session is anything exposing ``vehicle_id``, ``rate_class``, ``entry_time``
and ``exit_time`` (a :class:`SessionRecord` or a ``ParkingSession`` row).
"""

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from functools import lru_cache

from mallpark.config import settings
from mallpark.core.exceptions import ActiveSessionError, InvalidArgumentError
from mallpark.schemas.rates import RateSchedule
from mallpark.schemas.session import SegmentFee, SessionRecord
from mallpark.utils.constants import SECONDS_PER_HOUR, RateClass
from mallpark.utils.datetime_utils import ensure_utc

_ONE_SECOND = timedelta(seconds=1)


@lru_cache
def get_rate_schedule() -> RateSchedule:
    return RateSchedule(
        base_fee=settings.base_fee,
        base_window_hours=settings.base_window_hours,
        hourly_rates={
            RateClass.SMALL: settings.hourly_rate_small,
            RateClass.MEDIUM: settings.hourly_rate_medium,
            RateClass.LARGE: settings.hourly_rate_large,
        },
        daily_fee=settings.daily_fee,
        hours_per_day=settings.hours_per_day,
        continuous_gap_max_hours=settings.continuous_gap_max_hours,
    )


def whole_seconds(delta: timedelta) -> int:
    """Length of ``delta`` in whole seconds, any fraction rounded up."""
    return -(-delta // _ONE_SECOND)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    return whole_seconds(end - start)


def billable_hours(seconds: int) -> int:
    """Started hours in ``seconds``; every stay bills at least one hour."""
    return max(1, (seconds + SECONDS_PER_HOUR - 1) // SECONDS_PER_HOUR)


def hourly_block_fee(hours: int, rate_class: RateClass, schedule: RateSchedule) -> int:
    if hours <= schedule.base_window_hours:
        return schedule.base_fee
    excess_hours = hours - schedule.base_window_hours
    return schedule.base_fee + excess_hours * schedule.hourly_rate(rate_class)


def is_continuous(
    previous_exit: datetime, next_entry: datetime, schedule: RateSchedule | None = None
) -> bool:
    """Whether a return at ``next_entry`` continues the stay that ended at ``previous_exit``.

    Shared by segmentation and the previous-ticket link so the two never disagree.
    """
    schedule = schedule or get_rate_schedule()
    gap_seconds = elapsed_seconds(previous_exit, next_entry)
    return gap_seconds <= schedule.continuous_gap_max_hours * SECONDS_PER_HOUR


def _require_closed(session) -> None:
    if session is None:
        raise InvalidArgumentError("Session cannot be None")
    if session.exit_time is None:
        raise ActiveSessionError("Cannot calculate fee for an active session")
    if ensure_utc(session.exit_time) < ensure_utc(session.entry_time):
        raise InvalidArgumentError("Exit time cannot be before entry time")


def _require_sessions(sessions: Sequence) -> None:
    if not sessions:
        raise InvalidArgumentError("Sessions cannot be None or empty")
    for session in sessions:
        _require_closed(session)


def _as_record(session) -> SessionRecord:
    if isinstance(session, SessionRecord):
        return session
    return SessionRecord.model_validate(session)


def compute_fee(session, schedule: RateSchedule | None = None) -> int:
    """Fee for one closed session under its own rate class."""
    schedule = schedule or get_rate_schedule()
    _require_closed(session)
    session = _as_record(session)

    hours = billable_hours(elapsed_seconds(session.entry_time, session.exit_time))
    days, remainder = divmod(hours, schedule.hours_per_day)
    if days > 0:
        remainder_fee = hourly_block_fee(remainder, session.rate_class, schedule) if remainder else 0
        return days * schedule.daily_fee + remainder_fee
    return hourly_block_fee(hours, session.rate_class, schedule)


def prorate_mixed_classes(
    duration_hours: int,
    hours_by_class: Mapping[RateClass, float],
    schedule: RateSchedule | None = None,
) -> int:
    """Price a block spent under several rate classes.

    The base window is flat. Excess hours are drawn from the most expensive
    class first, each class contributing at most the hours actually spent in
    it. Excess left over once every class is used up is billed at the rate of
    the last class that contributed (the cheapest class if none did).
    """
    schedule = schedule or get_rate_schedule()
    if duration_hours <= schedule.base_window_hours:
        return schedule.base_fee

    remaining = duration_hours - schedule.base_window_hours
    fee = schedule.base_fee
    ordered = schedule.classes_by_rate()
    last_class = None
    for rate_class in ordered:
        if remaining <= 0:
            break
        take = min(math.ceil(hours_by_class.get(rate_class, 0)), remaining)
        if take <= 0:
            continue
        fee += take * schedule.hourly_rate(rate_class)
        remaining -= take
        last_class = rate_class

    if remaining > 0:
        fee += remaining * schedule.hourly_rate(last_class or ordered[-1])
    return fee


def split_into_segments(sessions: Sequence, schedule: RateSchedule | None = None) -> list[list]:
    """Group closed sessions into continuous runs, ordered by entry time."""
    schedule = schedule or get_rate_schedule()
    _require_sessions(sessions)

    ordered = sorted((_as_record(s) for s in sessions), key=lambda s: s.entry_time)
    segments = [[ordered[0]]]
    for previous, current in zip(ordered, ordered[1:]):
        if is_continuous(previous.exit_time, current.entry_time, schedule):
            segments[-1].append(current)
        else:
            segments.append([current])
    return segments


def price_segment(segment: Sequence, schedule: RateSchedule | None = None) -> SegmentFee:
    schedule = schedule or get_rate_schedule()
    _require_sessions(segment)

    records = [_as_record(s) for s in segment]
    parked = sum((r.exit_time - r.entry_time for r in records), timedelta())
    parked_seconds = whole_seconds(parked)

    seconds_by_class: dict[RateClass, timedelta] = {}
    for record in records:
        seconds_by_class[record.rate_class] = (
            seconds_by_class.get(record.rate_class, timedelta()) + record.exit_time - record.entry_time
        )
    hours_by_class = {
        rate_class: (whole_seconds(delta) + SECONDS_PER_HOUR - 1) // SECONDS_PER_HOUR
        for rate_class, delta in seconds_by_class.items()
    }

    hours = billable_hours(parked_seconds)
    days, remainder = divmod(hours, schedule.hours_per_day)
    fee = days * schedule.daily_fee
    if days == 0 or remainder > 0:
        if len(hours_by_class) == 1:
            fee += hourly_block_fee(remainder, records[0].rate_class, schedule)
        else:
            fee += prorate_mixed_classes(remainder, hours_by_class, schedule)

    return SegmentFee(
        sessions=records,
        parked_seconds=parked_seconds,
        billed_hours=hours,
        days=days,
        hours_by_class=hours_by_class,
        fee=fee,
    )


def summarize_segments(sessions: Sequence, schedule: RateSchedule | None = None) -> list[SegmentFee]:
    schedule = schedule or get_rate_schedule()
    return [price_segment(segment, schedule) for segment in split_into_segments(sessions, schedule)]


def compute_continuous_fee(sessions: Sequence, schedule: RateSchedule | None = None) -> int:
    """Fee for a vehicle's sessions with the continuous rate applied.

    Sessions whose gaps stay within the continuous window are billed as one
    stay; only time actually parked is counted, never the gaps.
    """
    schedule = schedule or get_rate_schedule()
    _require_sessions(sessions)
    if len(sessions) == 1:
        return compute_fee(sessions[0], schedule)
    return sum(segment.fee for segment in summarize_segments(sessions, schedule))
