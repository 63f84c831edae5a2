"""Local-time helpers. Calendar days are the marketplace's local days, not UTC days."""

from datetime import datetime

from marketplace.config import get_settings


def local_now() -> datetime:
    return datetime.now(get_settings().tz)


def to_local(moment: datetime) -> datetime:
    """Convert an aware datetime to local time; naive values are taken as already local."""
    tz = get_settings().tz
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def day_key(moment: datetime) -> str:
    """``YYYYMMDD`` of the local calendar day containing ``moment``."""
    return to_local(moment).strftime("%Y%m%d")
