"""Admin application service: backfill trigger and ledger invariant check."""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_royalty.application.backfill import RoyaltyBackfillService
from src.rl_royalty.application.schemas import BackfillSummaryResponse
from src.rl_royalty.infrastructure.db_models import (
    LedgerEntryORM,
    RoyaltyAccountORM,
    RoyaltyEntryORM,
)

logger = logging.getLogger(__name__)


def _ledger_sums_stmt():
    return (
        select(LedgerEntryORM.user_id, func.coalesce(func.sum(LedgerEntryORM.amount), 0))
        .group_by(LedgerEntryORM.user_id)
    )


def _royalty_sums_stmt():
    return (
        select(RoyaltyEntryORM.designer_id, func.coalesce(func.sum(RoyaltyEntryORM.amount), 0))
        .group_by(RoyaltyEntryORM.designer_id)
    )


async def verify_ledger_invariants(db: AsyncSession) -> list[str]:
    """Per account: points == sum(ledger) and lifetime == sum(royalty entries).

    Returns violation strings; an empty list means the books balance.
    """
    violations: list[str] = []
    accounts = (
        await db.execute(
            select(
                RoyaltyAccountORM.user_id,
                RoyaltyAccountORM.points,
                RoyaltyAccountORM.lifetime_earnings,
            )
        )
    ).all()
    ledger_sums = {row[0]: int(row[1]) for row in (await db.execute(_ledger_sums_stmt())).all()}
    royalty_sums = {row[0]: int(row[1]) for row in (await db.execute(_royalty_sums_stmt())).all()}

    seen: set[str] = set()
    for user_id, points, lifetime in accounts:
        seen.add(user_id)
        if points < 0:
            violations.append(f"negative points: user={user_id} points={points}")
        ledger_total = ledger_sums.get(user_id, 0)
        if points != ledger_total:
            violations.append(
                f"points drift: user={user_id} points={points} ledger_sum={ledger_total}"
            )
        earned = royalty_sums.get(user_id, 0)
        if lifetime != earned:
            violations.append(
                f"lifetime drift: user={user_id} lifetime={lifetime} royalty_sum={earned}"
            )

    for user_id in sorted(set(ledger_sums) - seen):
        violations.append(f"ledger rows without account: user={user_id}")

    for msg in violations:
        logger.error("Ledger invariant violated: %s", msg)
    return violations


class AdminService:
    def __init__(self, backfill: RoyaltyBackfillService | None = None) -> None:
        self._backfill = backfill or RoyaltyBackfillService()

    async def run_backfill(self, db: AsyncSession) -> BackfillSummaryResponse:
        return await self._backfill.run(db)

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, Any]:
        violations = await verify_ledger_invariants(db)
        return {"ok": len(violations) == 0, "violations": violations}
