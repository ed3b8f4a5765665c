"""Domain models for rl_royalty — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class OrderLineItem:
    line_item_id: str
    design_id: str | None
    unit_price: int          # rupees
    quantity: int


@dataclass
class PaidOrder:
    id: str
    buyer_id: str | None     # None for guest checkout
    is_paid: bool
    paid_at: datetime | None
    items: list[OrderLineItem] = field(default_factory=list)


@dataclass(frozen=True)
class SaleFact:
    """One royalty-relevant line of a paid order. Derived, never stored."""

    order_id: str
    line_item_id: str
    design_id: str
    buyer_id: str | None
    designer_id: str         # owner as resolved at extraction time
    eligible: bool
    unit_price: int
    quantity: int
    paid_at: datetime | None

    @property
    def gross_amount(self) -> int:
        return self.unit_price * self.quantity


@dataclass
class RoyaltyEntry:
    id: int                  # BIGSERIAL
    order_id: str
    design_id: str
    designer_id: str
    buyer_id: str | None
    amount: int              # royalty credited
    gross_amount: int        # unit_price * quantity, summed over the order's lines
    quantity: int
    created_at: datetime | None = None


@dataclass
class RoyaltyBalance:
    user_id: str
    points: int
    lifetime_earnings: int
    version: int = 0


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    user_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # positive=credit negative=debit
    balance_after: int               # points snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass
class OrderCreditSummary:
    order_id: str
    facts_seen: int = 0
    self_purchases_skipped: int = 0
    unknown_designs_skipped: int = 0
    ineligible_skipped: int = 0
    entries_created: int = 0
    duplicates_skipped: int = 0
    integrity_failures: int = 0
    amount_credited: int = 0
    credited: list[RoyaltyEntry] = field(default_factory=list)
