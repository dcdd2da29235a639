from datetime import date, datetime, timezone


def utcnow() -> datetime:
    # naive UTC, the way the columns store it
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()
