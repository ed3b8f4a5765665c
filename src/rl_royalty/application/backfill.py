"""Royalty backfill — replay every paid order through the idempotent credit path.

Safe to run any number of times: entries already present are skipped by the
(order_id, design_id) unique key, so a second run credits nothing. A Redis
lock keeps two runs from overlapping; it is an efficiency guard, correctness
does not depend on it.

Each order commits on its own. A failing order is logged and counted, and the
run moves on to the next one.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rl_common.errors import BackfillInProgressError
from src.rl_common.redis_client import get_redis
from src.rl_royalty.application.schemas import BackfillSummaryResponse
from src.rl_royalty.application.service import RoyaltyApplicationService
from src.rl_royalty.domain.models import OrderCreditSummary
from src.rl_royalty.domain.repository import PaidOrderSourceProtocol
from src.rl_royalty.infrastructure.order_source import PaidOrderSource

logger = logging.getLogger(__name__)

BACKFILL_LOCK_KEY = "royalty:backfill:lock"


@dataclass
class BackfillTotals:
    orders_scanned: int = 0
    orders_failed: int = 0
    facts_seen: int = 0
    entries_created: int = 0
    duplicates_skipped: int = 0
    self_purchases_skipped: int = 0
    unknown_designs_skipped: int = 0
    ineligible_skipped: int = 0
    integrity_failures: int = 0
    amount_credited: int = 0

    def add(self, s: OrderCreditSummary) -> None:
        self.facts_seen += s.facts_seen
        self.entries_created += s.entries_created
        self.duplicates_skipped += s.duplicates_skipped
        self.self_purchases_skipped += s.self_purchases_skipped
        self.unknown_designs_skipped += s.unknown_designs_skipped
        self.ineligible_skipped += s.ineligible_skipped
        self.integrity_failures += s.integrity_failures
        self.amount_credited += s.amount_credited


class RoyaltyBackfillService:
    def __init__(
        self,
        royalty_service: RoyaltyApplicationService | None = None,
        order_source: PaidOrderSourceProtocol | None = None,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        batch_size: int = settings.BACKFILL_BATCH_SIZE,
    ) -> None:
        self._royalty = royalty_service or RoyaltyApplicationService()
        self._orders: PaidOrderSourceProtocol = order_source or PaidOrderSource()
        self._redis_factory = redis_factory
        self._batch_size = batch_size

    async def run(self, db: AsyncSession) -> BackfillSummaryResponse:
        redis = await self._redis_factory()
        token = uuid.uuid4().hex
        acquired = await redis.set(
            BACKFILL_LOCK_KEY, token, nx=True, ex=settings.BACKFILL_LOCK_TTL_SECONDS
        )
        if not acquired:
            raise BackfillInProgressError()

        try:
            totals = await self._replay_all(db)
        finally:
            if await redis.get(BACKFILL_LOCK_KEY) == token:
                await redis.delete(BACKFILL_LOCK_KEY)

        logger.info(
            "Royalty backfill finished: orders=%d created=%d duplicates=%d "
            "integrity_failures=%d failed_orders=%d amount=%d",
            totals.orders_scanned,
            totals.entries_created,
            totals.duplicates_skipped,
            totals.integrity_failures,
            totals.orders_failed,
            totals.amount_credited,
        )
        return BackfillSummaryResponse(**asdict(totals))

    async def _replay_all(self, db: AsyncSession) -> BackfillTotals:
        totals = BackfillTotals()
        after_id: str | None = None
        while True:
            orders = await self._orders.list_paid_orders(db, after_id, self._batch_size)
            if not orders:
                break
            for order in orders:
                totals.orders_scanned += 1
                try:
                    summary = await self._royalty.credit_paid_order(db, order)
                except Exception:
                    logger.exception("Backfill failed for order %s, skipping", order.id)
                    totals.orders_failed += 1
                    continue
                totals.add(summary)
            after_id = orders[-1].id
            if len(orders) < self._batch_size:
                break
        return totals
