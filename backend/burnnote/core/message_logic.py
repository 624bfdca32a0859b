from datetime import datetime, timedelta, timezone

MESSAGE_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expiry_for(created_at: datetime) -> datetime:
    return created_at + MESSAGE_TTL


def is_expired(record, now: datetime) -> bool:
    """A record stops being disclosable the instant `now` reaches its expiry."""
    return now >= record.expires_at
