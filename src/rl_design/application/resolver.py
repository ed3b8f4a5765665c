"""DesignOwnershipResolver — who created a design, and does it earn royalty.

Lookup order is fixed: flat customization requests first, then 3D designs.
The first match wins, so an id present in both tables resolves to the
flat record.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.errors import DesignNotFoundError
from src.rl_design.domain.models import DesignRef
from src.rl_design.domain.repository import DesignRepositoryProtocol
from src.rl_design.infrastructure.persistence import DesignRepository


class DesignOwnershipResolver:
    def __init__(self, repo: DesignRepositoryProtocol | None = None) -> None:
        self._repo: DesignRepositoryProtocol = repo or DesignRepository()

    async def resolve_owner(self, db: AsyncSession, design_id: str) -> DesignRef | None:
        design = await self._repo.get_flat_design(db, design_id)
        if design is not None:
            return design
        return await self._repo.get_rich_design(db, design_id)

    async def require_owner(self, db: AsyncSession, design_id: str) -> DesignRef:
        design = await self.resolve_owner(db, design_id)
        if design is None:
            raise DesignNotFoundError(design_id)
        return design
