"""WithdrawalRepository — raw SQL persistence for withdrawal_requests.

State transitions are compare-and-swap updates (`WHERE status = 'pending'`):
a result of 0 rows means another request already moved the row, and the
caller reports a conflict.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.enums import WithdrawalStatus
from src.rl_common.errors import InternalError
from src.rl_payout.domain.models import BankDetails
from src.rl_withdrawal.domain.models import AdminWithdrawalView, WithdrawalRequest

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, user_id, amount, account_name, account_number, ifsc_code, bank_name,
    upi_id, status, admin_note, transaction_id, payout_id, processed_by,
    processed_at, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO withdrawal_requests
        (id, user_id, amount, account_name, account_number, ifsc_code,
         bank_name, upi_id, status)
    VALUES
        (:id, :user_id, :amount, :account_name, :account_number, :ifsc_code,
         :bank_name, :upi_id, 'pending')
    RETURNING {_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM withdrawal_requests WHERE id = :id")

_GET_BY_ID_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM withdrawal_requests WHERE id = :id FOR UPDATE"
)

_FIND_RECENT_ACTIVE_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM withdrawal_requests
    WHERE user_id = :user_id
      AND created_at >= :since
      AND status IN ('pending', 'processed')
    ORDER BY created_at DESC
    LIMIT 1
""")

_MARK_PROCESSED_SQL = text(f"""
    UPDATE withdrawal_requests
    SET status = 'processed',
        transaction_id = :transaction_id,
        payout_id = :payout_id,
        admin_note = :admin_note,
        processed_by = :processed_by,
        processed_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_MARK_REJECTED_SQL = text(f"""
    UPDATE withdrawal_requests
    SET status = 'rejected',
        admin_note = :admin_note,
        processed_by = :processed_by,
        processed_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM withdrawal_requests
    WHERE user_id = :user_id
    ORDER BY created_at DESC
    LIMIT :limit
""")

_LIST_FOR_ADMIN_SQL = text("""
    SELECT w.id, w.user_id, w.amount, w.account_name, w.account_number,
           w.ifsc_code, w.bank_name, w.upi_id, w.status, w.admin_note,
           w.transaction_id, w.payout_id, w.processed_by, w.processed_at,
           w.created_at, w.updated_at,
           u.name AS user_name, u.email AS user_email
    FROM withdrawal_requests w
    LEFT JOIN users u ON CAST(u.id AS TEXT) = w.user_id
    WHERE (CAST(:status AS TEXT) IS NULL OR w.status = :status)
    ORDER BY w.created_at DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_request(row: Any) -> WithdrawalRequest:
    return WithdrawalRequest(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        bank=BankDetails(
            account_name=row.account_name,
            account_number=row.account_number,
            ifsc_code=row.ifsc_code,
            bank_name=row.bank_name,
            upi_id=row.upi_id,
        ),
        status=WithdrawalStatus(row.status),
        admin_note=row.admin_note,
        transaction_id=row.transaction_id,
        payout_id=row.payout_id,
        processed_by=row.processed_by,
        processed_at=row.processed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class WithdrawalRepository:
    async def insert(self, db: AsyncSession, request: WithdrawalRequest) -> WithdrawalRequest:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": request.id,
                "user_id": request.user_id,
                "amount": request.amount,
                "account_name": request.bank.account_name,
                "account_number": request.bank.account_number,
                "ifsc_code": request.bank.ifsc_code,
                "bank_name": request.bank.bank_name,
                "upi_id": request.bank.upi_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Withdrawal insert returned no rows — this should never happen")
        return _row_to_request(row)

    async def get_by_id(
        self, db: AsyncSession, request_id: str, for_update: bool = False
    ) -> WithdrawalRequest | None:
        sql = _GET_BY_ID_FOR_UPDATE_SQL if for_update else _GET_BY_ID_SQL
        result = await db.execute(sql, {"id": request_id})
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def find_recent_active(
        self, db: AsyncSession, user_id: str, since: datetime
    ) -> WithdrawalRequest | None:
        result = await db.execute(
            _FIND_RECENT_ACTIVE_SQL, {"user_id": user_id, "since": since}
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_processed(
        self,
        db: AsyncSession,
        request_id: str,
        transaction_id: str | None,
        payout_id: str | None,
        admin_note: str,
        processed_by: str,
    ) -> WithdrawalRequest | None:
        result = await db.execute(
            _MARK_PROCESSED_SQL,
            {
                "id": request_id,
                "transaction_id": transaction_id,
                "payout_id": payout_id,
                "admin_note": admin_note,
                "processed_by": processed_by,
            },
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_rejected(
        self, db: AsyncSession, request_id: str, admin_note: str, processed_by: str
    ) -> WithdrawalRequest | None:
        result = await db.execute(
            _MARK_REJECTED_SQL,
            {"id": request_id, "admin_note": admin_note, "processed_by": processed_by},
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[WithdrawalRequest]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_request(row) for row in result.fetchall()]

    async def list_for_admin(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[AdminWithdrawalView]:
        result = await db.execute(_LIST_FOR_ADMIN_SQL, {"status": status, "limit": limit})
        return [
            AdminWithdrawalView(
                request=_row_to_request(row),
                user_name=row.user_name or "Unknown User",
                user_email=row.user_email or "",
            )
            for row in result.fetchall()
        ]
