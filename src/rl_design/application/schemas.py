"""Pydantic schemas for rl_design API."""

from pydantic import BaseModel

from src.rl_design.domain.models import DesignRef


class DesignOwnerResponse(BaseModel):
    design_id: str
    kind: str
    owner_id: str
    status: str
    is_eligible: bool
    is_public: bool

    @classmethod
    def from_design(cls, design: DesignRef) -> "DesignOwnerResponse":
        return cls(
            design_id=design.id,
            kind=design.kind.value,
            owner_id=design.owner_id,
            status=design.status,
            is_eligible=design.is_eligible,
            is_public=design.is_public,
        )
