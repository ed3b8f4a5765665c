"""Domain models for rl_design — pure dataclasses, no SQLAlchemy dependency.

A design id may point at either of two historical shapes: a flat
customization request (`custom_requests`) or a rich 3D design (`designs`).
Both are read through the same `DesignRef` capability.
"""

from dataclasses import dataclass

from src.rl_common.enums import DesignKind

ELIGIBLE_STATUS = "approved"


@dataclass(frozen=True)
class DesignRef:
    id: str
    kind: DesignKind
    owner_id: str
    status: str
    has_royalty_offer: bool   # set only by the admin offer workflow
    is_public: bool

    @property
    def is_eligible(self) -> bool:
        """Royalty is earned only on approved designs carrying an accepted offer."""
        return self.has_royalty_offer and self.status.lower() == ELIGIBLE_STATUS
