"""Payout domain models — what the workflow sends and what it gets back."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BankDetails:
    account_name: str
    account_number: str
    ifsc_code: str
    bank_name: str
    upi_id: str | None = None

    @property
    def masked_account_number(self) -> str:
        return f"****{self.account_number[-4:]}"


@dataclass(frozen=True)
class PayoutResult:
    """Outcome of one logical payout. Never a "maybe": success or failure."""

    success: bool
    transaction_id: str | None = None   # bank UTR when known, else provider payout id
    payout_id: str | None = None
    status: str | None = None
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "PayoutResult":
        return cls(success=False, error=error)
