"""DesignRepository — read-only lookups over both design tables.

Neither table is written by this service; the eligibility columns belong to
the admin approval workflow.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.enums import DesignKind
from src.rl_design.domain.models import DesignRef

_GET_FLAT_DESIGN_SQL = text("""
    SELECT id, user_id, status, has_royalty_offer, is_public_design AS is_public
    FROM custom_requests
    WHERE id = :design_id
""")

_GET_RICH_DESIGN_SQL = text("""
    SELECT id, user_id, status, has_royalty_offer, is_public
    FROM designs
    WHERE id = :design_id
""")


def _row_to_design(row: Any, kind: DesignKind) -> DesignRef:
    return DesignRef(
        id=row.id,
        kind=kind,
        owner_id=str(row.user_id),
        status=row.status or "",
        has_royalty_offer=bool(row.has_royalty_offer),
        is_public=bool(row.is_public),
    )


class DesignRepository:
    async def get_flat_design(
        self, db: AsyncSession, design_id: str
    ) -> DesignRef | None:
        result = await db.execute(_GET_FLAT_DESIGN_SQL, {"design_id": design_id})
        row = result.fetchone()
        return _row_to_design(row, DesignKind.FLAT) if row else None

    async def get_rich_design(
        self, db: AsyncSession, design_id: str
    ) -> DesignRef | None:
        result = await db.execute(_GET_RICH_DESIGN_SQL, {"design_id": design_id})
        row = result.fetchone()
        return _row_to_design(row, DesignKind.RICH) if row else None
