from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Aware UTC instant; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
