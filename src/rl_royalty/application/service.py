"""RoyaltyApplicationService — extraction, calculation and idempotent crediting.

`credit_paid_order` is the single path from "order paid" to balances; the
live notification and the backfill both go through it, which is what makes a
replay safe. Read operations run without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.errors import RoyaltyIntegrityError
from src.rl_common.money import rupees_to_display
from src.rl_common.pagination import cursor_decode, cursor_encode
from src.rl_royalty.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    RoyaltyHistoryItem,
    RoyaltyHistoryResponse,
)
from src.rl_royalty.domain.calculator import royalty_for_facts
from src.rl_royalty.domain.extractor import SaleEventExtractor, group_by_design
from src.rl_royalty.domain.models import OrderCreditSummary, PaidOrder
from src.rl_royalty.domain.repository import RoyaltyLedgerRepositoryProtocol
from src.rl_royalty.infrastructure.persistence import RoyaltyLedgerRepository

logger = logging.getLogger(__name__)


class RoyaltyApplicationService:
    def __init__(
        self,
        repo: RoyaltyLedgerRepositoryProtocol | None = None,
        extractor: SaleEventExtractor | None = None,
    ) -> None:
        self._repo: RoyaltyLedgerRepositoryProtocol = repo or RoyaltyLedgerRepository()
        self._extractor = extractor or SaleEventExtractor()

    async def credit_paid_order(self, db: AsyncSession, order: PaidOrder) -> OrderCreditSummary:
        """Credit every eligible designer of `order` exactly once, then commit.

        Integrity failures (designer user missing) are logged and skipped;
        the other credits of the same order still land.
        """
        summary = OrderCreditSummary(order_id=order.id)
        try:
            facts = await self._extractor.extract_sale_facts(db, order, summary)
            summary.facts_seen = len(facts)

            for (order_id, design_id), group in group_by_design(facts).items():
                designer_id = group[0].designer_id
                if not group[0].eligible:
                    logger.info(
                        "Royalty skipped, design not eligible: order=%s design=%s",
                        order_id, design_id,
                    )
                    summary.ineligible_skipped += 1
                    continue

                amount = royalty_for_facts(group)
                try:
                    entry = await self._repo.credit_if_absent(
                        db,
                        order_id=order_id,
                        design_id=design_id,
                        designer_id=designer_id,
                        amount=amount,
                        buyer_id=order.buyer_id,
                        gross_amount=sum(f.gross_amount for f in group),
                        quantity=sum(f.quantity for f in group),
                    )
                except RoyaltyIntegrityError as e:
                    logger.error("Royalty credit skipped: %s", e.message)
                    summary.integrity_failures += 1
                    continue

                if entry is None:
                    summary.duplicates_skipped += 1
                    continue
                summary.entries_created += 1
                summary.amount_credited += entry.amount
                summary.credited.append(entry)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if summary.entries_created:
            logger.info(
                "Royalties credited: order=%s entries=%d amount=%d",
                order.id, summary.entries_created, summary.amount_credited,
            )
        return summary

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._repo.get_balance(db, user_id)
        return BalanceResponse.from_amounts(
            user_id=user_id,
            points=balance.points,
            lifetime=balance.lifetime_earnings,
        )

    async def list_history(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
    ) -> RoyaltyHistoryResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_royalty_entries(db, user_id, cursor_id, limit + 1)
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            RoyaltyHistoryItem(
                id=e.id,
                order_id=e.order_id,
                design_id=e.design_id,
                sale_amount=e.gross_amount,
                quantity=e.quantity,
                royalty_earned=e.amount,
                royalty_earned_display=rupees_to_display(e.amount),
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return RoyaltyHistoryResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            LedgerEntryItem(
                id=e.id,
                entry_type=e.entry_type,
                amount=e.amount,
                amount_display=rupees_to_display(e.amount),
                balance_after=e.balance_after,
                balance_after_display=rupees_to_display(e.balance_after),
                reference_type=e.reference_type,
                reference_id=e.reference_id,
                description=e.description,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
