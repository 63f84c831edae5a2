"""Delivery window rules.

Orders are delivered in one of three fixed local-time slots. A slot can be
booked as long as it still closes at least the configured lead time (4 hours
by default) after the order is placed, so a 16:00-20:00 slot stays open until
16:00. Everything here is pure: pass ``now`` to pin the clock.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from marketplace.config import get_settings
from marketplace.errors import InvalidSlotError, LeadTimeTooShortError, PastDateError
from marketplace.utils.clock import local_now, to_local


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


class DeliverySlot(Enum):
    MORNING = "08:00-12:00"
    AFTERNOON = "12:00-16:00"
    EVENING = "16:00-20:00"

    @property
    def start(self) -> time:
        return _parse_time(self.value.split("-")[0])

    @property
    def end(self) -> time:
        return _parse_time(self.value.split("-")[1])

    @classmethod
    def parse(cls, value: str) -> "DeliverySlot":
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidSlotError(
                "Invalid delivery time slot. Must be 08:00-12:00, 12:00-16:00, or 16:00-20:00"
            ) from exc


@dataclass(frozen=True)
class DeliveryWindow:
    delivery_date: date
    slot: DeliverySlot
    starts_at: datetime
    ends_at: datetime
    minimum_instant: datetime


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _context(now: datetime | None) -> tuple[datetime, datetime]:
    current = to_local(now) if now is not None else local_now()
    return current, current + timedelta(hours=get_settings().delivery_lead_time_hours)


def _at(delivery_date: date, moment: time) -> datetime:
    return datetime.combine(delivery_date, moment, tzinfo=get_settings().tz)


def validate_delivery_window(delivery_date, delivery_slot: str, now: datetime | None = None) -> DeliveryWindow:
    """Check a requested date and slot against the delivery rules.

    Raises ``InvalidSlotError`` for an unknown slot, ``PastDateError`` for a
    date before today, and ``LeadTimeTooShortError`` when the slot closes
    before ``now`` plus the lead time. On success the returned window carries
    the earliest deliverable instant for display.

    The lead time is measured against the slot's end, not its start: at 15:00
    with a 4-hour lead time the 16:00-20:00 slot is still bookable. Comparing
    the start would reject it.
    """
    slot = DeliverySlot.parse(delivery_slot)
    requested = _as_date(delivery_date)
    current, minimum = _context(now)

    if requested < current.date():
        raise PastDateError("Delivery date cannot be in the past")

    ends_at = _at(requested, slot.end)
    if ends_at < minimum:
        hours = get_settings().delivery_lead_time_hours
        raise LeadTimeTooShortError(
            f"Delivery time must be at least {hours} hours from now. "
            f"Minimum delivery time: {minimum.strftime('%d %b %Y, %I:%M %p')}",
            minimum_instant=minimum,
        )

    return DeliveryWindow(
        delivery_date=requested,
        slot=slot,
        starts_at=_at(requested, slot.start),
        ends_at=ends_at,
        minimum_instant=minimum,
    )


def available_slots(delivery_date, now: datetime | None = None) -> list[dict]:
    """Every slot for ``delivery_date`` with whether it can still be booked and why not."""
    requested = _as_date(delivery_date)
    current, minimum = _context(now)
    hours = get_settings().delivery_lead_time_hours

    slots = []
    for slot in DeliverySlot:
        if requested < current.date():
            available, reason = False, "Delivery date cannot be in the past"
        elif _at(requested, slot.end) < minimum:
            available, reason = False, f"Requires at least {hours} hours advance notice"
        else:
            available, reason = True, "Available"
        slots.append({"slot": slot.value, "available": available, "reason": reason})
    return slots
