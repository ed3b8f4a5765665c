"""005: create royalty_accounts and royalty_entries tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE royalty_accounts (
            user_id             VARCHAR(64) PRIMARY KEY,
            points              BIGINT      NOT NULL DEFAULT 0,
            lifetime_earnings   BIGINT      NOT NULL DEFAULT 0,
            version             BIGINT      NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_royalty_accounts_points_gte_0   CHECK (points >= 0),
            CONSTRAINT ck_royalty_accounts_lifetime_gte_0 CHECK (lifetime_earnings >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_royalty_accounts_updated_at
            BEFORE UPDATE ON royalty_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE royalty_entries (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        VARCHAR(64)     NOT NULL,
            design_id       VARCHAR(64)     NOT NULL,
            designer_id     VARCHAR(64)     NOT NULL,
            buyer_id        VARCHAR(64),
            amount          BIGINT          NOT NULL,
            gross_amount    BIGINT          NOT NULL,
            quantity        INT             NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_royalty_entries_order_design UNIQUE (order_id, design_id),
            CONSTRAINT ck_royalty_entries_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_royalty_entries_designer ON royalty_entries (designer_id, id DESC);"
    )
    op.execute("COMMENT ON TABLE royalty_entries IS 'Royalty credits — append-only, one per (order, design)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS royalty_entries CASCADE;")
    op.execute("DROP TABLE IF EXISTS royalty_accounts CASCADE;")
