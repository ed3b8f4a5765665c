"""RoyaltyLedgerRepository — concrete implementation of RoyaltyLedgerRepositoryProtocol.

Every balance mutation is a single atomic PostgreSQL statement with RETURNING.
A result of 0 rows means a business constraint was violated (duplicate credit,
missing user, insufficient points).

Transaction ownership: The CALLER (application service) commits or rolls back.
`credit_if_absent` additionally opens a SAVEPOINT so one bad credit can be
discarded without losing the rest of the caller's transaction.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.enums import LedgerEntryType, ReferenceType
from src.rl_common.errors import InsufficientBalanceError, InternalError, RoyaltyIntegrityError
from src.rl_royalty.domain.models import LedgerEntry, RoyaltyBalance, RoyaltyEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL: royalty_entries (idempotency guard, append-only)
# ---------------------------------------------------------------------------

_INSERT_ROYALTY_ENTRY_SQL = text("""
    INSERT INTO royalty_entries
        (order_id, design_id, designer_id, buyer_id, amount, gross_amount, quantity)
    VALUES
        (:order_id, :design_id, :designer_id, :buyer_id, :amount, :gross_amount, :quantity)
    ON CONFLICT (order_id, design_id) DO NOTHING
    RETURNING id, order_id, design_id, designer_id, buyer_id,
              amount, gross_amount, quantity, created_at
""")

_LIST_ROYALTY_ENTRIES_SQL = text("""
    SELECT id, order_id, design_id, designer_id, buyer_id,
           amount, gross_amount, quantity, created_at
    FROM royalty_entries
    WHERE designer_id = :designer_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# SQL: royalty_accounts mutations
# ---------------------------------------------------------------------------

# Creates the account on first credit. The SELECT FROM users guard makes a
# credit for a missing user return no row instead of inventing an account.
_CREDIT_SQL = text("""
    INSERT INTO royalty_accounts (user_id, points, lifetime_earnings)
    SELECT CAST(u.id AS TEXT), :amount, :amount
    FROM users u
    WHERE CAST(u.id AS TEXT) = :user_id
    ON CONFLICT (user_id) DO UPDATE
    SET points            = royalty_accounts.points + EXCLUDED.points,
        lifetime_earnings = royalty_accounts.lifetime_earnings + EXCLUDED.lifetime_earnings,
        version           = royalty_accounts.version + 1,
        updated_at        = NOW()
    RETURNING user_id, points, lifetime_earnings, version
""")

_DEBIT_SQL = text("""
    UPDATE royalty_accounts
    SET points = points - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND points >= :amount
    RETURNING user_id, points, lifetime_earnings, version
""")

# Lifetime earnings is untouched: a reversal returns reserved points, it is not income.
_REVERSE_SQL = text("""
    UPDATE royalty_accounts
    SET points = points + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING user_id, points, lifetime_earnings, version
""")

_GET_BALANCE_SQL = text("""
    SELECT user_id, points, lifetime_earnings, version
    FROM royalty_accounts
    WHERE user_id = :user_id
""")

# Serializes withdrawal creation per user until the transaction ends.
_LOCK_ACCOUNT_SQL = text("""
    SELECT user_id, points, lifetime_earnings, version
    FROM royalty_accounts
    WHERE user_id = :user_id
    FOR UPDATE
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries (balance movements, append-only)
# ---------------------------------------------------------------------------

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_entry(row: Any) -> RoyaltyEntry:
    return RoyaltyEntry(
        id=row.id,
        order_id=row.order_id,
        design_id=row.design_id,
        designer_id=row.designer_id,
        buyer_id=row.buyer_id,
        amount=row.amount,
        gross_amount=row.gross_amount,
        quantity=row.quantity,
        created_at=row.created_at,
    )


def _row_to_balance(row: Any) -> RoyaltyBalance:
    return RoyaltyBalance(
        user_id=row.user_id,
        points=row.points,
        lifetime_earnings=row.lifetime_earnings,
        version=row.version,
    )


def _row_to_ledger(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        user_id=row.user_id,
        entry_type=row.entry_type,
        amount=row.amount,
        balance_after=row.balance_after,
        reference_type=row.reference_type,
        reference_id=row.reference_id,
        description=row.description,
        created_at=row.created_at,
    )


class RoyaltyLedgerRepository:
    """Concrete repository — all operations atomic at the SQL level."""

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
    ) -> RoyaltyEntry | None:
        """Credit `designer_id` once per (order_id, design_id).

        Returns the new RoyaltyEntry, or None when the pair was already
        credited. Raises RoyaltyIntegrityError (savepoint rolled back) when the
        designer has no user row.
        """
        async with db.begin_nested():
            result = await db.execute(
                _INSERT_ROYALTY_ENTRY_SQL,
                {
                    "order_id": order_id,
                    "design_id": design_id,
                    "designer_id": designer_id,
                    "buyer_id": buyer_id,
                    "amount": amount,
                    "gross_amount": gross_amount,
                    "quantity": quantity,
                },
            )
            row = result.fetchone()
            if row is None:
                logger.info(
                    "Royalty idempotency hit: order=%s design=%s", order_id, design_id
                )
                return None
            entry = _row_to_entry(row)

            balance_result = await db.execute(
                _CREDIT_SQL, {"user_id": designer_id, "amount": amount}
            )
            balance_row = balance_result.fetchone()
            if balance_row is None:
                raise RoyaltyIntegrityError(designer_id, order_id, design_id)
            balance = _row_to_balance(balance_row)

            await self._write_ledger(
                db,
                user_id=designer_id,
                entry_type=LedgerEntryType.ROYALTY_CREDIT,
                amount=amount,
                balance_after=balance.points,
                reference_type=ReferenceType.ROYALTY_ENTRY,
                reference_id=str(entry.id),
                description=f"Royalty for design {design_id} in order {order_id}",
            )
        return entry

    async def get_balance(self, db: AsyncSession, user_id: str) -> RoyaltyBalance:
        result = await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            # No credit has ever landed for this user
            return RoyaltyBalance(user_id=user_id, points=0, lifetime_earnings=0)
        return _row_to_balance(row)

    async def lock_account(self, db: AsyncSession, user_id: str) -> RoyaltyBalance:
        result = await db.execute(_LOCK_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return RoyaltyBalance(user_id=user_id, points=0, lifetime_earnings=0)
        return _row_to_balance(row)

    async def debit_for_withdrawal(
        self, db: AsyncSession, user_id: str, amount: int, withdrawal_id: str
    ) -> RoyaltyBalance:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_balance(db, user_id)
            raise InsufficientBalanceError(amount, current.points)
        balance = _row_to_balance(row)
        await self._write_ledger(
            db,
            user_id=user_id,
            entry_type=LedgerEntryType.WITHDRAWAL_DEBIT,
            amount=-amount,
            balance_after=balance.points,
            reference_type=ReferenceType.WITHDRAWAL,
            reference_id=withdrawal_id,
            description="Withdrawal requested",
        )
        return balance

    async def reverse_withdrawal(
        self, db: AsyncSession, user_id: str, amount: int, withdrawal_id: str
    ) -> RoyaltyBalance:
        result = await db.execute(_REVERSE_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Royalty account missing for user {user_id}")
        balance = _row_to_balance(row)
        await self._write_ledger(
            db,
            user_id=user_id,
            entry_type=LedgerEntryType.WITHDRAWAL_REVERSAL,
            amount=amount,
            balance_after=balance.points,
            reference_type=ReferenceType.WITHDRAWAL,
            reference_id=withdrawal_id,
            description="Withdrawal rejected, points returned",
        )
        return balance

    async def list_royalty_entries(
        self, db: AsyncSession, designer_id: str, cursor_id: int | None, limit: int
    ) -> list[RoyaltyEntry]:
        result = await db.execute(
            _LIST_ROYALTY_ENTRIES_SQL,
            {"designer_id": designer_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def _write_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        entry_type: LedgerEntryType,
        amount: int,
        balance_after: int,
        reference_type: ReferenceType,
        reference_id: str,
        description: str,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": user_id,
                "entry_type": entry_type.value,
                "amount": amount,
                "balance_after": balance_after,
                "reference_type": reference_type.value,
                "reference_id": reference_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return _row_to_ledger(row)
