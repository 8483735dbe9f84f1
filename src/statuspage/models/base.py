from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current time as an aware UTC datetime."""
    return datetime.now(UTC)


def isoformat_z(value: datetime) -> str:
    """Render a datetime the way stored records carry it: ISO-8601, millisecond, 'Z' suffix."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return isoformat_z(utc_now())


def parse_timestamp(value: object) -> float:
    """Parse a stored ISO timestamp into epoch seconds; unparsable values sort as 0."""
    if not isinstance(value, str) or not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()
