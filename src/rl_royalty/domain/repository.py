"""Repository Protocols — dependency inversion for testability.

Unit tests inject a mock that conforms to these Protocols.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_royalty.domain.models import LedgerEntry, PaidOrder, RoyaltyBalance, RoyaltyEntry


class RoyaltyLedgerRepositoryProtocol(Protocol):
    async def credit_if_absent(
        self,
        db: AsyncSession,
        order_id: str,
        design_id: str,
        designer_id: str,
        amount: int,
        buyer_id: str | None = None,
        gross_amount: int = 0,
        quantity: int = 0,
    ) -> RoyaltyEntry | None: ...

    async def get_balance(self, db: AsyncSession, user_id: str) -> RoyaltyBalance: ...

    async def lock_account(self, db: AsyncSession, user_id: str) -> RoyaltyBalance: ...

    async def debit_for_withdrawal(
        self, db: AsyncSession, user_id: str, amount: int, withdrawal_id: str
    ) -> RoyaltyBalance: ...

    async def reverse_withdrawal(
        self, db: AsyncSession, user_id: str, amount: int, withdrawal_id: str
    ) -> RoyaltyBalance: ...

    async def list_royalty_entries(
        self, db: AsyncSession, designer_id: str, cursor_id: int | None, limit: int
    ) -> list[RoyaltyEntry]: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...


class PaidOrderSourceProtocol(Protocol):
    async def list_paid_orders(
        self, db: AsyncSession, after_id: str | None, limit: int
    ) -> list[PaidOrder]: ...
