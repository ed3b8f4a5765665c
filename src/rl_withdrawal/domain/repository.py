"""Repository Protocol — dependency inversion for testability."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_withdrawal.domain.models import AdminWithdrawalView, WithdrawalRequest


class WithdrawalRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, request: WithdrawalRequest) -> WithdrawalRequest: ...

    async def get_by_id(
        self, db: AsyncSession, request_id: str, for_update: bool = False
    ) -> WithdrawalRequest | None: ...

    async def find_recent_active(
        self, db: AsyncSession, user_id: str, since: datetime
    ) -> WithdrawalRequest | None: ...

    async def mark_processed(
        self,
        db: AsyncSession,
        request_id: str,
        transaction_id: str | None,
        payout_id: str | None,
        admin_note: str,
        processed_by: str,
    ) -> WithdrawalRequest | None: ...

    async def mark_rejected(
        self, db: AsyncSession, request_id: str, admin_note: str, processed_by: str
    ) -> WithdrawalRequest | None: ...

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[WithdrawalRequest]: ...

    async def list_for_admin(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[AdminWithdrawalView]: ...
