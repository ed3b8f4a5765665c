"""WithdrawalApplicationService — the pending → processed | rejected workflow.

Money movement per transition:
  create   points -= amount   (same transaction as the insert)
  approve  none               (automatic path calls the payout gateway first)
  reject   points += amount   (same transaction as the status change)

A payout gateway failure rolls the transaction back and leaves the request
pending; there is no intermediate "in flight" status.
"""

import logging
import re
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rl_common.datetime_utils import days_ago
from src.rl_common.enums import WithdrawalAction, WithdrawalStatus
from src.rl_common.errors import (
    InvalidBankDetailsError,
    InvalidWithdrawalAmountError,
    PayoutFailedError,
    WithdrawalConflictError,
    WithdrawalCooldownError,
    WithdrawalNotFoundError,
)
from src.rl_common.id_generator import generate_id
from src.rl_payout.domain.gateway import PayoutGatewayProtocol
from src.rl_payout.domain.models import BankDetails, PayoutResult
from src.rl_payout.infrastructure.razorpay_gateway import RazorpayPayoutGateway
from src.rl_royalty.domain.repository import RoyaltyLedgerRepositoryProtocol
from src.rl_royalty.infrastructure.persistence import RoyaltyLedgerRepository
from src.rl_withdrawal.application.schemas import (
    AdminWithdrawalItem,
    AdminWithdrawalListResponse,
    CreateWithdrawalRequest,
    PayoutStatusResponse,
    WithdrawalDecisionRequest,
    WithdrawalDecisionResponse,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from src.rl_withdrawal.domain.models import (
    AUTO_PAYOUT_NOTE,
    MANUAL_PAYOUT_NOTE,
    REJECTED_NOTE,
    WithdrawalRequest,
)
from src.rl_withdrawal.domain.repository import WithdrawalRepositoryProtocol
from src.rl_withdrawal.infrastructure.persistence import WithdrawalRepository

logger = logging.getLogger(__name__)

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
USER_LIST_LIMIT = 20
ADMIN_LIST_LIMIT = 100


def normalize_ifsc(ifsc_code: str) -> str:
    code = ifsc_code.strip().upper()
    if not IFSC_PATTERN.match(code):
        raise InvalidBankDetailsError("Invalid IFSC code format")
    return code


class WithdrawalApplicationService:
    def __init__(
        self,
        repo: WithdrawalRepositoryProtocol | None = None,
        ledger: RoyaltyLedgerRepositoryProtocol | None = None,
        gateway: PayoutGatewayProtocol | None = None,
    ) -> None:
        self._repo: WithdrawalRepositoryProtocol = repo or WithdrawalRepository()
        self._ledger: RoyaltyLedgerRepositoryProtocol = ledger or RoyaltyLedgerRepository()
        self._gateway: PayoutGatewayProtocol = gateway or RazorpayPayoutGateway()

    # ------------------------------------------------------------------
    # User side
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, user_id: str, body: CreateWithdrawalRequest
    ) -> WithdrawalResponse:
        if body.amount < settings.WITHDRAWAL_MIN_AMOUNT:
            raise InvalidWithdrawalAmountError(settings.WITHDRAWAL_MIN_AMOUNT)
        bank = BankDetails(
            account_name=body.account_name.strip(),
            account_number=body.account_number,
            ifsc_code=normalize_ifsc(body.ifsc_code),
            bank_name=body.bank_name.strip(),
            upi_id=body.upi_id or None,
        )

        try:
            await self._ledger.lock_account(db, user_id)
            cooldown = settings.WITHDRAWAL_COOLDOWN_DAYS
            recent = await self._repo.find_recent_active(db, user_id, days_ago(cooldown))
            if recent is not None and recent.created_at is not None:
                next_at = recent.created_at + timedelta(days=cooldown)
                raise WithdrawalCooldownError(next_at.isoformat())

            request_id = generate_id()
            await self._ledger.debit_for_withdrawal(db, user_id, body.amount, request_id)
            created = await self._repo.insert(
                db,
                WithdrawalRequest(id=request_id, user_id=user_id, amount=body.amount, bank=bank),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Withdrawal requested: id=%s user=%s amount=%d", created.id, user_id, created.amount
        )
        return WithdrawalResponse.from_domain(created)

    async def list_mine(self, db: AsyncSession, user_id: str) -> WithdrawalListResponse:
        requests = await self._repo.list_by_user(db, user_id, USER_LIST_LIMIT)
        return WithdrawalListResponse(
            requests=[WithdrawalResponse.from_domain(r) for r in requests]
        )

    # ------------------------------------------------------------------
    # Admin side
    # ------------------------------------------------------------------

    async def list_for_admin(
        self, db: AsyncSession, status: WithdrawalStatus | None
    ) -> AdminWithdrawalListResponse:
        views = await self._repo.list_for_admin(
            db, status.value if status else None, ADMIN_LIST_LIMIT
        )
        return AdminWithdrawalListResponse(
            requests=[AdminWithdrawalItem.from_view(v) for v in views]
        )

    async def decide(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        body: WithdrawalDecisionRequest,
    ) -> WithdrawalDecisionResponse:
        if body.action is WithdrawalAction.APPROVE:
            return await self.approve(
                db,
                request_id,
                admin_id,
                admin_note=body.admin_note,
                transaction_id=body.transaction_id,
                skip_payout=body.skip_payout,
            )
        return await self.reject(db, request_id, admin_id, admin_note=body.admin_note)

    async def approve(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        admin_note: str | None = None,
        transaction_id: str | None = None,
        skip_payout: bool = False,
    ) -> WithdrawalDecisionResponse:
        payout: PayoutResult | None = None
        try:
            # Row lock: a concurrent approval waits here, then sees a terminal status
            request = await self._repo.get_by_id(db, request_id, for_update=True)
            if request is None:
                raise WithdrawalNotFoundError(request_id)
            request.ensure_pending()

            if not skip_payout and not transaction_id:
                payout = await self._gateway.payout(request.amount, request.bank, request.id)
                if not payout.success:
                    raise PayoutFailedError(
                        request.id, payout.error or "Payout processing failed"
                    )
                transaction_id = payout.transaction_id or payout.payout_id
                note = admin_note or AUTO_PAYOUT_NOTE
            else:
                note = admin_note or MANUAL_PAYOUT_NOTE

            updated = await self._repo.mark_processed(
                db,
                request_id,
                transaction_id=transaction_id,
                payout_id=payout.payout_id if payout else None,
                admin_note=note,
                processed_by=admin_id,
            )
            if updated is None:
                await self._raise_conflict(db, request_id)
            await db.commit()
        except PayoutFailedError as e:
            await db.rollback()
            logger.warning(
                "Withdrawal %s stays pending, payout failed: %s", request_id, e.provider_error
            )
            raise
        except Exception:
            await db.rollback()
            if payout is not None and payout.success:
                # Money left the provider but the status change did not persist.
                # Re-approving is safe: the provider dedupes on the withdrawal id.
                logger.critical(
                    "Payout %s sent for withdrawal %s but state not saved",
                    payout.payout_id, request_id,
                )
            raise

        logger.info(
            "Withdrawal processed: id=%s by=%s transaction=%s auto=%s",
            request_id, admin_id, transaction_id, payout is not None,
        )
        return WithdrawalDecisionResponse(
            id=request_id,
            status=WithdrawalStatus.PROCESSED.value,
            transaction_id=transaction_id,
            payout_status=payout.status if payout else None,
            message=(
                "Withdrawal approved and payout initiated via Razorpay"
                if payout
                else "Withdrawal approved (manual processing)"
            ),
        )

    async def reject(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        admin_note: str | None = None,
    ) -> WithdrawalDecisionResponse:
        try:
            updated = await self._repo.mark_rejected(
                db, request_id, admin_note=admin_note or REJECTED_NOTE, processed_by=admin_id
            )
            if updated is None:
                await self._raise_conflict(db, request_id)
            await self._ledger.reverse_withdrawal(db, updated.user_id, updated.amount, updated.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Withdrawal rejected: id=%s by=%s returned=%d to user=%s",
            request_id, admin_id, updated.amount, updated.user_id,
        )
        return WithdrawalDecisionResponse(
            id=request_id,
            status=WithdrawalStatus.REJECTED.value,
            transaction_id=None,
            payout_status=None,
            message="Withdrawal request rejected, points returned to user",
        )

    async def payout_status(self, db: AsyncSession, request_id: str) -> PayoutStatusResponse:
        request = await self._repo.get_by_id(db, request_id)
        if request is None:
            raise WithdrawalNotFoundError(request_id)
        if request.payout_id is None:
            # Manually processed, still pending, or rejected: nothing to ask the provider
            return PayoutStatusResponse(
                id=request.id,
                payout_id=None,
                transaction_id=request.transaction_id,
                provider_status=None,
                error=None,
            )
        result = await self._gateway.get_payout_status(request.payout_id)
        return PayoutStatusResponse(
            id=request.id,
            payout_id=request.payout_id,
            transaction_id=result.transaction_id or request.transaction_id,
            provider_status=result.status,
            error=result.error,
        )

    async def _raise_conflict(self, db: AsyncSession, request_id: str) -> None:
        current = await self._repo.get_by_id(db, request_id)
        if current is None:
            raise WithdrawalNotFoundError(request_id)
        raise WithdrawalConflictError(request_id, current.status.value)
