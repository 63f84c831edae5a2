"""Runtime settings for the marketplace, read from the environment.

Persistence, brokers and event processing are configured by Protean through
``domain.toml`` (with ``PROTEAN_ENV`` selecting the overlay). The settings here
cover the business knobs Protean knows nothing about.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    timezone: str = "Asia/Kolkata"
    delivery_lead_time_hours: int = 4
    guest_cart_ttl_hours: int = 24
    guest_cart_sweep_minutes: int = 15
    guest_cart_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    max_checkout_attempts: int = 3

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            timezone=os.getenv("MARKETPLACE_TIMEZONE", cls.timezone),
            delivery_lead_time_hours=_env_int("DELIVERY_LEAD_TIME_HOURS", cls.delivery_lead_time_hours),
            guest_cart_ttl_hours=_env_int("GUEST_CART_TTL_HOURS", cls.guest_cart_ttl_hours),
            guest_cart_sweep_minutes=_env_int("GUEST_CART_SWEEP_MINUTES", cls.guest_cart_sweep_minutes),
            guest_cart_backend=os.getenv("GUEST_CART_BACKEND", cls.guest_cart_backend).lower(),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            max_checkout_attempts=_env_int("MAX_CHECKOUT_ATTEMPTS", cls.max_checkout_attempts),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings; call ``get_settings.cache_clear()`` after changing the environment."""
    return Settings.from_env()
