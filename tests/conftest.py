"""Shared test fixtures."""

import os

# Required settings must exist before any src module imports config.settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests-only")
os.environ.setdefault("INTERNAL_API_TOKEN", "test-internal-token")

import itertools
from dataclasses import replace
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.rl_common.enums import LedgerEntryType, WithdrawalStatus
from src.rl_common.errors import InsufficientBalanceError, RoyaltyIntegrityError
from src.rl_royalty.domain.models import LedgerEntry, RoyaltyBalance, RoyaltyEntry
from src.rl_withdrawal.domain.models import AdminWithdrawalView, WithdrawalRequest


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class InMemoryLedger:
    """RoyaltyLedgerRepositoryProtocol backed by dicts.

    Mirrors the SQL semantics: unique (order_id, design_id), credits only to
    known users, conditional debit.
    """

    def __init__(self, users: set[str] | None = None) -> None:
        self.users = users if users is not None else set()
        self.entries: dict[tuple[str, str], RoyaltyEntry] = {}
        self.accounts: dict[str, RoyaltyBalance] = {}
        self.ledger: list[LedgerEntry] = []
        self.locked: list[str] = []
        self._ids = itertools.count(1)

    def seed(self, user_id: str, points: int) -> None:
        self.users.add(user_id)
        self.accounts[user_id] = RoyaltyBalance(user_id, points, points)
        self._append(user_id, LedgerEntryType.ROYALTY_CREDIT, points, points, "seed")

    def _append(
        self, user_id: str, entry_type: LedgerEntryType, amount: int, after: int, ref: str
    ) -> None:
        self.ledger.append(
            LedgerEntry(
                id=next(self._ids),
                user_id=user_id,
                entry_type=entry_type.value,
                amount=amount,
                balance_after=after,
                reference_id=ref,
                created_at=datetime.now(UTC),
            )
        )

    async def credit_if_absent(
        self, db, order_id, design_id, designer_id, amount,
        buyer_id=None, gross_amount=0, quantity=0,
    ):
        if (order_id, design_id) in self.entries:
            return None
        if designer_id not in self.users:
            raise RoyaltyIntegrityError(designer_id, order_id, design_id)
        entry = RoyaltyEntry(
            id=next(self._ids),
            order_id=order_id,
            design_id=design_id,
            designer_id=designer_id,
            buyer_id=buyer_id,
            amount=amount,
            gross_amount=gross_amount,
            quantity=quantity,
            created_at=datetime.now(UTC),
        )
        self.entries[(order_id, design_id)] = entry
        acct = self.accounts.setdefault(designer_id, RoyaltyBalance(designer_id, 0, 0))
        acct.points += amount
        acct.lifetime_earnings += amount
        self._append(designer_id, LedgerEntryType.ROYALTY_CREDIT, amount, acct.points, str(entry.id))
        return entry

    async def get_balance(self, db, user_id):
        acct = self.accounts.get(user_id)
        if acct is None:
            return RoyaltyBalance(user_id, 0, 0)
        return replace(acct)

    async def lock_account(self, db, user_id):
        self.locked.append(user_id)
        return await self.get_balance(db, user_id)

    async def debit_for_withdrawal(self, db, user_id, amount, withdrawal_id):
        acct = self.accounts.get(user_id)
        if acct is None or acct.points < amount:
            raise InsufficientBalanceError(amount, acct.points if acct else 0)
        acct.points -= amount
        self._append(user_id, LedgerEntryType.WITHDRAWAL_DEBIT, -amount, acct.points, withdrawal_id)
        return replace(acct)

    async def reverse_withdrawal(self, db, user_id, amount, withdrawal_id):
        acct = self.accounts[user_id]
        acct.points += amount
        self._append(
            user_id, LedgerEntryType.WITHDRAWAL_REVERSAL, amount, acct.points, withdrawal_id
        )
        return replace(acct)

    async def list_royalty_entries(self, db, designer_id, cursor_id, limit):
        rows = sorted(
            (e for e in self.entries.values() if e.designer_id == designer_id),
            key=lambda e: e.id,
            reverse=True,
        )
        if cursor_id is not None:
            rows = [e for e in rows if e.id < cursor_id]
        return rows[:limit]

    async def list_ledger_entries(self, db, user_id, cursor_id, limit, entry_type):
        rows = [e for e in reversed(self.ledger) if e.user_id == user_id]
        if entry_type is not None:
            rows = [e for e in rows if e.entry_type == entry_type]
        if cursor_id is not None:
            rows = [e for e in rows if e.id < cursor_id]
        return rows[:limit]

    def ledger_sum(self, user_id: str) -> int:
        return sum(e.amount for e in self.ledger if e.user_id == user_id)


class InMemoryWithdrawals:
    """WithdrawalRepositoryProtocol with the same CAS semantics as the SQL."""

    def __init__(self) -> None:
        self.rows: dict[str, WithdrawalRequest] = {}

    async def insert(self, db, request):
        stored = replace(request, created_at=request.created_at or datetime.now(UTC))
        self.rows[stored.id] = stored
        return replace(stored)

    async def get_by_id(self, db, request_id, for_update=False):
        row = self.rows.get(request_id)
        return replace(row) if row else None

    async def find_recent_active(self, db, user_id, since):
        for row in sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True):
            if (
                row.user_id == user_id
                and row.created_at >= since
                and row.status is not WithdrawalStatus.REJECTED
            ):
                return replace(row)
        return None

    async def mark_processed(
        self, db, request_id, transaction_id, payout_id, admin_note, processed_by
    ):
        row = self.rows.get(request_id)
        if row is None or not row.is_pending:
            return None
        row.status = WithdrawalStatus.PROCESSED
        row.transaction_id = transaction_id
        row.payout_id = payout_id
        row.admin_note = admin_note
        row.processed_by = processed_by
        row.processed_at = datetime.now(UTC)
        return replace(row)

    async def mark_rejected(self, db, request_id, admin_note, processed_by):
        row = self.rows.get(request_id)
        if row is None or not row.is_pending:
            return None
        row.status = WithdrawalStatus.REJECTED
        row.admin_note = admin_note
        row.processed_by = processed_by
        row.processed_at = datetime.now(UTC)
        return replace(row)

    async def list_by_user(self, db, user_id, limit):
        rows = [r for r in self.rows.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)[:limit]

    async def list_for_admin(self, db, status, limit):
        rows = [r for r in self.rows.values() if status is None or r.status.value == status]
        return [AdminWithdrawalView(r, "Designer", "designer@example.com") for r in rows][:limit]


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the backfill lock."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def get(self, key):
        return self.store.get(key)

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def withdrawals() -> InMemoryWithdrawals:
    return InMemoryWithdrawals()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
