"""Sale event extractor — turns a paid order into royalty-relevant facts.

Determinism matters: the backfill replays every historical order, so the same
order must always produce the same facts in the same order. Line items are
visited sorted by line_item_id and the owner is resolved fresh every time
(never taken from a denormalized column on the order).
"""

import logging
from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_design.application.resolver import DesignOwnershipResolver
from src.rl_royalty.domain.models import OrderCreditSummary, PaidOrder, SaleFact

logger = logging.getLogger(__name__)


class SaleEventExtractor:
    def __init__(self, resolver: DesignOwnershipResolver | None = None) -> None:
        self._resolver = resolver or DesignOwnershipResolver()

    async def extract_sale_facts(
        self,
        db: AsyncSession,
        order: PaidOrder,
        summary: OrderCreditSummary | None = None,
    ) -> list[SaleFact]:
        """Return one SaleFact per design-bearing line item, minus self-purchases.

        `summary`, when given, is updated with skip counters.
        """
        if not order.is_paid:
            return []

        facts: list[SaleFact] = []
        for item in sorted(order.items, key=lambda i: i.line_item_id):
            if not item.design_id:
                continue

            design = await self._resolver.resolve_owner(db, item.design_id)
            if design is None:
                logger.warning(
                    "Sale skipped, design not found: order=%s design=%s",
                    order.id, item.design_id,
                )
                if summary is not None:
                    summary.unknown_designs_skipped += 1
                continue

            if order.buyer_id is not None and order.buyer_id == design.owner_id:
                logger.info(
                    "Self-purchase skipped: order=%s design=%s user=%s",
                    order.id, item.design_id, order.buyer_id,
                )
                if summary is not None:
                    summary.self_purchases_skipped += 1
                continue

            facts.append(
                SaleFact(
                    order_id=order.id,
                    line_item_id=item.line_item_id,
                    design_id=item.design_id,
                    buyer_id=order.buyer_id,
                    designer_id=design.owner_id,
                    eligible=design.is_eligible,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    paid_at=order.paid_at,
                )
            )
        return facts


def group_by_design(facts: list[SaleFact]) -> dict[tuple[str, str], list[SaleFact]]:
    """Group facts by (order_id, design_id), the royalty entry key.

    Insertion order follows the (already sorted) facts.
    """
    groups: dict[tuple[str, str], list[SaleFact]] = defaultdict(list)
    for fact in facts:
        groups[(fact.order_id, fact.design_id)].append(fact)
    return dict(groups)
