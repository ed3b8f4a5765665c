"""Pydantic schemas for rl_withdrawal API."""

from pydantic import BaseModel, Field

from src.rl_common.datetime_utils import isoformat_or_none
from src.rl_common.enums import WithdrawalAction
from src.rl_common.money import rupees_to_display
from src.rl_withdrawal.domain.models import AdminWithdrawalView, WithdrawalRequest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateWithdrawalRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to withdraw in rupees")
    account_name: str = Field(..., min_length=1, max_length=128)
    account_number: str = Field(..., min_length=4, max_length=34, pattern=r"^[0-9A-Za-z]+$")
    ifsc_code: str = Field(..., min_length=1, max_length=16)
    bank_name: str = Field(..., min_length=1, max_length=128)
    upi_id: str | None = Field(None, max_length=128)


class WithdrawalDecisionRequest(BaseModel):
    action: WithdrawalAction
    admin_note: str | None = Field(None, max_length=500)
    transaction_id: str | None = Field(
        None, min_length=1, max_length=128, description="Manual bank reference; skips the gateway"
    )
    skip_payout: bool = False


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WithdrawalResponse(BaseModel):
    id: str
    amount: int
    amount_display: str
    status: str
    bank_name: str
    account_name: str
    account_number_masked: str
    ifsc_code: str
    admin_note: str | None
    transaction_id: str | None
    processed_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, w: WithdrawalRequest) -> "WithdrawalResponse":
        return cls(
            id=w.id,
            amount=w.amount,
            amount_display=rupees_to_display(w.amount),
            status=w.status.value,
            bank_name=w.bank.bank_name,
            account_name=w.bank.account_name,
            account_number_masked=w.bank.masked_account_number,
            ifsc_code=w.bank.ifsc_code,
            admin_note=w.admin_note,
            transaction_id=w.transaction_id,
            processed_at=isoformat_or_none(w.processed_at),
            created_at=isoformat_or_none(w.created_at),
        )


class WithdrawalListResponse(BaseModel):
    requests: list[WithdrawalResponse]


class AdminWithdrawalItem(BaseModel):
    """Admins see the full account number: they may need to pay manually."""

    id: str
    user_id: str
    user_name: str
    user_email: str
    amount: int
    amount_display: str
    status: str
    account_name: str
    account_number: str
    ifsc_code: str
    bank_name: str
    upi_id: str | None
    admin_note: str | None
    transaction_id: str | None
    payout_id: str | None
    processed_by: str | None
    processed_at: str | None
    created_at: str | None

    @classmethod
    def from_view(cls, view: AdminWithdrawalView) -> "AdminWithdrawalItem":
        w = view.request
        return cls(
            id=w.id,
            user_id=w.user_id,
            user_name=view.user_name,
            user_email=view.user_email,
            amount=w.amount,
            amount_display=rupees_to_display(w.amount),
            status=w.status.value,
            account_name=w.bank.account_name,
            account_number=w.bank.account_number,
            ifsc_code=w.bank.ifsc_code,
            bank_name=w.bank.bank_name,
            upi_id=w.bank.upi_id,
            admin_note=w.admin_note,
            transaction_id=w.transaction_id,
            payout_id=w.payout_id,
            processed_by=w.processed_by,
            processed_at=isoformat_or_none(w.processed_at),
            created_at=isoformat_or_none(w.created_at),
        )


class AdminWithdrawalListResponse(BaseModel):
    requests: list[AdminWithdrawalItem]


class WithdrawalDecisionResponse(BaseModel):
    id: str
    status: str
    transaction_id: str | None
    payout_status: str | None
    message: str


class PayoutStatusResponse(BaseModel):
    id: str
    payout_id: str | None
    transaction_id: str | None
    provider_status: str | None
    error: str | None
