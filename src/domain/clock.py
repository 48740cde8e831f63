from datetime import UTC, datetime


def utc_now() -> datetime:
    """Naive UTC now; all persisted timestamps are naive UTC"""
    return datetime.now(UTC).replace(tzinfo=None)
