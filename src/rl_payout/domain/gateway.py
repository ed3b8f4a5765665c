"""Payout gateway Protocol — the withdrawal workflow depends on this, not on Razorpay."""

from typing import Protocol

from src.rl_payout.domain.models import BankDetails, PayoutResult


class PayoutGatewayProtocol(Protocol):
    async def payout(
        self, amount: int, bank_details: BankDetails, reference_id: str
    ) -> PayoutResult: ...

    async def get_payout_status(self, payout_id: str) -> PayoutResult: ...
