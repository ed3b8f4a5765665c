"""004: create orders and order_items tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         UUID            REFERENCES users (id),
            is_paid         BOOLEAN         NOT NULL DEFAULT FALSE,
            paid_at         TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    # design_id may point at either design table, so it carries no foreign key
    op.execute("""
        CREATE TABLE order_items (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        VARCHAR(64)     NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
            design_id       VARCHAR(64),
            unit_price      BIGINT          NOT NULL,
            quantity        INT             NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_order_items_price_gte_0 CHECK (unit_price >= 0),
            CONSTRAINT ck_order_items_qty_gt_0    CHECK (quantity > 0)
        );
    """)
    op.execute("CREATE INDEX idx_orders_paid ON orders (id) WHERE is_paid = TRUE;")
    op.execute("CREATE INDEX idx_order_items_order ON order_items (order_id);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
