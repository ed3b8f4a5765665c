"""Integer arithmetic utilities for royalty points.

All prices, royalties and balances are int, in whole rupees (1 point = ₹1).
No float, no Decimal. The payout provider boundary converts to paise.
"""

PAISE_PER_RUPEE = 100
BPS_DENOMINATOR = 10_000


def validate_amount(amount: int) -> None:
    """Validate that an amount is a non-negative integer."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer, got {amount!r}")
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")


def rupees_to_display(amount: int) -> str:
    """Convert rupees to display string: 1500 -> '₹1,500', -200 -> '-₹200'."""
    if amount < 0:
        return f"-₹{-amount:,}"
    return f"₹{amount:,}"


def rupees_to_paise(amount: int) -> int:
    return amount * PAISE_PER_RUPEE


def apply_rate_half_up(gross: int, rate_bps: int) -> int:
    """Apply a basis-point rate and round half-up to the nearest whole unit.

    result = round(gross * rate_bps / 10000), ties away from zero.
    Using integer arithmetic: (a * r + 5000) // 10000
    """
    validate_amount(gross)
    if rate_bps < 0:
        raise ValueError(f"rate_bps must be non-negative, got {rate_bps}")
    return (gross * rate_bps + BPS_DENOMINATOR // 2) // BPS_DENOMINATOR
