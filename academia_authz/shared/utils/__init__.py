from academia_authz.shared.utils.clock import Clock, FixedClock, SystemClock
from academia_authz.shared.utils.datetime import (
    ensure_utc,
    ensure_utc_or_none,
    utc_now,
)
from academia_authz.shared.utils.generators import generate_cuid

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "ensure_utc_or_none",
]
