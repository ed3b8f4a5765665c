"""Withdrawal domain model and its state machine.

    pending ──approve──▶ processed   (terminal)
       │
       └────reject────▶ rejected    (terminal, points returned)

Points are debited when the request is created, so approval never touches the
balance and rejection is the only transition that credits it back.
"""

from dataclasses import dataclass
from datetime import datetime

from src.rl_common.enums import WithdrawalStatus
from src.rl_common.errors import WithdrawalConflictError
from src.rl_payout.domain.models import BankDetails

AUTO_PAYOUT_NOTE = "Auto-processed via Razorpay"
MANUAL_PAYOUT_NOTE = "Manually approved"
REJECTED_NOTE = "Request rejected"


@dataclass
class WithdrawalRequest:
    id: str
    user_id: str
    amount: int                          # rupees, already debited from points
    bank: BankDetails
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    admin_note: str | None = None
    transaction_id: str | None = None
    payout_id: str | None = None
    processed_by: str | None = None
    processed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is WithdrawalStatus.PENDING

    def ensure_pending(self) -> None:
        """Every admin decision starts here; terminal states never move."""
        if self.status.is_terminal:
            raise WithdrawalConflictError(self.id, self.status.value)


@dataclass
class AdminWithdrawalView:
    request: WithdrawalRequest
    user_name: str
    user_email: str
