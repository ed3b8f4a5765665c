"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_design.domain.models import DesignRef


class DesignRepositoryProtocol(Protocol):
    async def get_flat_design(
        self, db: AsyncSession, design_id: str
    ) -> DesignRef | None: ...

    async def get_rich_design(
        self, db: AsyncSession, design_id: str
    ) -> DesignRef | None: ...
