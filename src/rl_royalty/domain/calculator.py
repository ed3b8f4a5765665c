"""Royalty calculator — pure functions, no I/O.

The rate is a single platform-wide constant today. Callers always go through
`compute_royalty`, so a per-design rate only needs a different `rate_bps`.
"""

from collections.abc import Iterable

from config.settings import settings
from src.rl_common.money import apply_rate_half_up
from src.rl_royalty.domain.models import SaleFact

ROYALTY_RATE_BPS: int = settings.ROYALTY_RATE_BPS


def compute_royalty(unit_price: int, quantity: int, rate_bps: int = ROYALTY_RATE_BPS) -> int:
    """round(unit_price * quantity * rate), half-up, in whole rupees."""
    if unit_price < 0:
        raise ValueError(f"unit_price must be non-negative, got {unit_price}")
    if quantity < 0:
        raise ValueError(f"quantity must be non-negative, got {quantity}")
    return apply_rate_half_up(unit_price * quantity, rate_bps)


def royalty_for_facts(facts: Iterable[SaleFact], rate_bps: int = ROYALTY_RATE_BPS) -> int:
    """Sum of per-line royalties; each line is rounded on its own."""
    return sum(compute_royalty(f.unit_price, f.quantity, rate_bps) for f in facts)
