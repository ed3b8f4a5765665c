"""Pydantic schemas for rl_royalty API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.rl_common.money import rupees_to_display
from src.rl_royalty.domain.models import OrderCreditSummary, OrderLineItem, PaidOrder

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SaleLineItem(BaseModel):
    line_item_id: str = Field(..., min_length=1, max_length=64)
    design_id: str | None = Field(None, max_length=64)
    unit_price: int = Field(..., ge=0, description="Unit price in rupees")
    quantity: int = Field(..., gt=0)


class OrderPaidNotification(BaseModel):
    """Sent by the storefront once an order's payment is verified."""

    order_id: str = Field(..., min_length=1, max_length=64)
    buyer_id: str | None = Field(None, max_length=64)
    paid_at: datetime | None = None
    items: list[SaleLineItem] = Field(default_factory=list)

    def to_paid_order(self) -> PaidOrder:
        return PaidOrder(
            id=self.order_id,
            buyer_id=self.buyer_id,
            is_paid=True,
            paid_at=self.paid_at,
            items=[
                OrderLineItem(
                    line_item_id=i.line_item_id,
                    design_id=i.design_id,
                    unit_price=i.unit_price,
                    quantity=i.quantity,
                )
                for i in self.items
            ],
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    points: int
    points_display: str
    lifetime_earnings: int
    lifetime_earnings_display: str

    @classmethod
    def from_amounts(cls, user_id: str, points: int, lifetime: int) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            points=points,
            points_display=rupees_to_display(points),
            lifetime_earnings=lifetime,
            lifetime_earnings_display=rupees_to_display(lifetime),
        )


class CreditedEntryItem(BaseModel):
    entry_id: int
    design_id: str
    designer_id: str
    amount: int


class CreditSummaryResponse(BaseModel):
    order_id: str
    facts_seen: int
    entries_created: int
    duplicates_skipped: int
    self_purchases_skipped: int
    unknown_designs_skipped: int
    ineligible_skipped: int
    integrity_failures: int
    amount_credited: int
    credited: list[CreditedEntryItem]

    @classmethod
    def from_summary(cls, summary: OrderCreditSummary) -> "CreditSummaryResponse":
        return cls(
            order_id=summary.order_id,
            facts_seen=summary.facts_seen,
            entries_created=summary.entries_created,
            duplicates_skipped=summary.duplicates_skipped,
            self_purchases_skipped=summary.self_purchases_skipped,
            unknown_designs_skipped=summary.unknown_designs_skipped,
            ineligible_skipped=summary.ineligible_skipped,
            integrity_failures=summary.integrity_failures,
            amount_credited=summary.amount_credited,
            credited=[
                CreditedEntryItem(
                    entry_id=e.id,
                    design_id=e.design_id,
                    designer_id=e.designer_id,
                    amount=e.amount,
                )
                for e in summary.credited
            ],
        )


class RoyaltyHistoryItem(BaseModel):
    id: int
    order_id: str
    design_id: str
    sale_amount: int
    quantity: int
    royalty_earned: int
    royalty_earned_display: str
    created_at: str  # ISO8601 string


class RoyaltyHistoryResponse(BaseModel):
    items: list[RoyaltyHistoryItem]
    next_cursor: str | None
    has_more: bool


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    balance_after: int
    balance_after_display: str
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class BackfillSummaryResponse(BaseModel):
    orders_scanned: int
    orders_failed: int
    facts_seen: int
    entries_created: int
    duplicates_skipped: int
    self_purchases_skipped: int
    unknown_designs_skipped: int
    ineligible_skipped: int
    integrity_failures: int
    amount_credited: int
