"""Tests for DesignOwnershipResolver and DesignRef eligibility."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rl_common.enums import DesignKind
from src.rl_common.errors import DesignNotFoundError
from src.rl_design.application.resolver import DesignOwnershipResolver
from src.rl_design.domain.models import DesignRef
from src.rl_design.infrastructure.persistence import DesignRepository


def _design(kind: DesignKind = DesignKind.FLAT, **kwargs) -> DesignRef:
    return DesignRef(
        id=kwargs.get("id", "D-1"),
        kind=kind,
        owner_id=kwargs.get("owner_id", "designer-1"),
        status=kwargs.get("status", "approved"),
        has_royalty_offer=kwargs.get("has_royalty_offer", True),
        is_public=kwargs.get("is_public", True),
    )


class TestEligibility:
    def test_approved_with_offer(self) -> None:
        assert _design().is_eligible is True

    def test_status_is_case_insensitive(self) -> None:
        assert _design(status="APPROVED").is_eligible is True

    def test_no_offer(self) -> None:
        assert _design(has_royalty_offer=False).is_eligible is False

    def test_not_approved(self) -> None:
        assert _design(status="pending").is_eligible is False


class TestResolveOwner:
    async def test_flat_design_wins(self) -> None:
        repo = AsyncMock()
        repo.get_flat_design.return_value = _design(DesignKind.FLAT, owner_id="flat-owner")
        repo.get_rich_design.return_value = _design(DesignKind.RICH, owner_id="rich-owner")
        resolver = DesignOwnershipResolver(repo=repo)

        design = await resolver.resolve_owner(MagicMock(), "D-1")

        assert design is not None
        assert design.owner_id == "flat-owner"
        repo.get_rich_design.assert_not_awaited()

    async def test_falls_back_to_rich_design(self) -> None:
        repo = AsyncMock()
        repo.get_flat_design.return_value = None
        repo.get_rich_design.return_value = _design(DesignKind.RICH, owner_id="rich-owner")
        resolver = DesignOwnershipResolver(repo=repo)

        design = await resolver.resolve_owner(MagicMock(), "D-1")

        assert design is not None
        assert design.kind is DesignKind.RICH

    async def test_unknown_design_returns_none(self) -> None:
        repo = AsyncMock()
        repo.get_flat_design.return_value = None
        repo.get_rich_design.return_value = None
        resolver = DesignOwnershipResolver(repo=repo)

        assert await resolver.resolve_owner(MagicMock(), "nope") is None

    async def test_require_owner_raises(self) -> None:
        repo = AsyncMock()
        repo.get_flat_design.return_value = None
        repo.get_rich_design.return_value = None
        resolver = DesignOwnershipResolver(repo=repo)

        with pytest.raises(DesignNotFoundError) as exc_info:
            await resolver.require_owner(MagicMock(), "nope")
        assert exc_info.value.http_status == 404


class TestDesignRepository:
    async def test_maps_flat_row(self) -> None:
        row = MagicMock()
        row.id = "CR-1"
        row.user_id = "7f1c"
        row.status = "Approved"
        row.has_royalty_offer = True
        row.is_public = False
        result = MagicMock()
        result.fetchone.return_value = row
        db = MagicMock()
        db.execute = AsyncMock(return_value=result)

        design = await DesignRepository().get_flat_design(db, "CR-1")

        assert design is not None
        assert design.kind is DesignKind.FLAT
        assert design.owner_id == "7f1c"
        assert design.is_eligible is True

    async def test_missing_row(self) -> None:
        result = MagicMock()
        result.fetchone.return_value = None
        db = MagicMock()
        db.execute = AsyncMock(return_value=result)

        assert await DesignRepository().get_rich_design(db, "X") is None
