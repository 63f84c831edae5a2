"""Daily order numbering: ``ORD-YYYYMMDD-NNN``.

Each local calendar day has its own counter record. The record is created on
its own, before any checkout touches it, and checkout only ever increments an
existing record inside the Unit of Work that stores the order. Two checkouts
racing for the same day then conflict on the record's version instead of
minting the same number, and the loser retries.
"""

import threading
from datetime import datetime

import structlog
from protean.exceptions import (
    ExpectedVersionError,
    ObjectNotFoundError,
    TransactionError,
    ValidationError,
)
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.utils.clock import day_key

logger = structlog.get_logger(__name__)

ORDER_ID_PREFIX = "ORD"

# Serialises counter creation within a process; across processes the
# primary key on ``day`` rejects the second insert.
_creation_lock = threading.Lock()


@marketplace.aggregate
class DailyOrderSequence:
    day = String(identifier=True, required=True, max_length=8)  # YYYYMMDD
    last_value = Integer(default=0, min_value=0)

    def advance(self) -> int:
        self.last_value = (self.last_value or 0) + 1
        return self.last_value


def format_order_id(day: str, sequence: int) -> str:
    return f"{ORDER_ID_PREFIX}-{day}-{sequence:03d}"


def _find_sequence(key: str) -> DailyOrderSequence | None:
    try:
        return current_domain.repository_for(DailyOrderSequence).get(key)
    except ObjectNotFoundError:
        return None


def ensure_day_sequence(now: datetime) -> None:
    """Create the counter for the local day containing ``now`` if it is missing.

    Must be called outside any Unit of Work: the record is committed in a
    transaction of its own. Losing the creation race to another process is
    fine as long as the record exists afterwards.
    """
    key = day_key(now)
    if _find_sequence(key) is not None:
        return

    with _creation_lock:
        if _find_sequence(key) is not None:
            return
        try:
            current_domain.repository_for(DailyOrderSequence).add(DailyOrderSequence(day=key, last_value=0))
            logger.info("Order sequence started", day=key)
        except (ValidationError, TransactionError) as exc:
            if _find_sequence(key) is None:
                raise
            logger.info("Order sequence already started elsewhere", day=key, error=str(exc))


def next_order_id(now: datetime) -> str:
    """Draw the next number for the local day containing ``now``.

    The day's counter must already exist (see ``ensure_day_sequence``). A
    missing counter is reported as a version conflict so the caller retries
    after creating it.
    """
    key = day_key(now)
    counter = _find_sequence(key)
    if counter is None:
        raise ExpectedVersionError(f"Order sequence for {key} has not been started")

    sequence = counter.advance()
    current_domain.repository_for(DailyOrderSequence).add(counter)
    return format_order_id(key, sequence)


def orders_started_on(now: datetime) -> int:
    """How many order numbers were handed out on the local day containing ``now``."""
    counter = _find_sequence(day_key(now))
    return (counter.last_value or 0) if counter else 0
