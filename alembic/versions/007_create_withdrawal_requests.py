"""007: create withdrawal_requests table

Revision ID: 007
Revises: 006
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE withdrawal_requests (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            amount          BIGINT          NOT NULL,
            account_name    VARCHAR(128)    NOT NULL,
            account_number  VARCHAR(34)     NOT NULL,
            ifsc_code       VARCHAR(16)     NOT NULL,
            bank_name       VARCHAR(128)    NOT NULL,
            upi_id          VARCHAR(128),
            status          VARCHAR(20)     NOT NULL DEFAULT 'pending',
            admin_note      VARCHAR(500),
            transaction_id  VARCHAR(128),
            payout_id       VARCHAR(64),
            processed_by    VARCHAR(64),
            processed_at    TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_withdrawal_status CHECK (status IN ('pending', 'processed', 'rejected')),
            CONSTRAINT ck_withdrawal_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_withdrawal_user_time ON withdrawal_requests (user_id, created_at DESC);"
    )
    op.execute(
        "CREATE INDEX idx_withdrawal_status_time ON withdrawal_requests (status, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_withdrawal_requests_updated_at
            BEFORE UPDATE ON withdrawal_requests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS withdrawal_requests CASCADE;")
