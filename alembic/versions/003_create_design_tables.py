"""003: create design tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Flat designs: buyer-submitted custom print requests
    op.execute("""
        CREATE TABLE custom_requests (
            id                  VARCHAR(64)     PRIMARY KEY,
            user_id             UUID            NOT NULL REFERENCES users (id),
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            has_royalty_offer   BOOLEAN         NOT NULL DEFAULT FALSE,
            is_public_design    BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    # Rich designs: editor-built designs
    op.execute("""
        CREATE TABLE designs (
            id                  VARCHAR(64)     PRIMARY KEY,
            user_id             UUID            NOT NULL REFERENCES users (id),
            status              VARCHAR(20)     NOT NULL DEFAULT 'draft',
            has_royalty_offer   BOOLEAN         NOT NULL DEFAULT FALSE,
            is_public           BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_custom_requests_user ON custom_requests (user_id);")
    op.execute("CREATE INDEX idx_designs_user ON designs (user_id);")
    for table in ("custom_requests", "designs"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS designs CASCADE;")
    op.execute("DROP TABLE IF EXISTS custom_requests CASCADE;")
