"""Tests for request/response schema validation and masking."""

import pytest
from pydantic import ValidationError

from src.rl_common.enums import WithdrawalAction
from src.rl_payout.domain.models import BankDetails
from src.rl_royalty.application.schemas import OrderPaidNotification
from src.rl_withdrawal.application.schemas import (
    CreateWithdrawalRequest,
    WithdrawalDecisionRequest,
    WithdrawalResponse,
)
from src.rl_withdrawal.domain.models import WithdrawalRequest


class TestCreateWithdrawalRequest:
    def test_valid(self) -> None:
        body = CreateWithdrawalRequest(
            amount=500, account_name="A", account_number="1234", ifsc_code="x", bank_name="B"
        )
        assert body.upi_id is None

    def test_blank_bank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateWithdrawalRequest(
                amount=500, account_name="A", account_number="1234", ifsc_code="x", bank_name=""
            )

    def test_non_alphanumeric_account_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateWithdrawalRequest(
                amount=500, account_name="A", account_number="12-34", ifsc_code="x", bank_name="B"
            )


def test_decision_defaults() -> None:
    body = WithdrawalDecisionRequest(action="approve")
    assert body.action is WithdrawalAction.APPROVE
    assert body.skip_payout is False
    assert body.transaction_id is None


def test_response_masks_account_number() -> None:
    w = WithdrawalRequest(
        id="W-1",
        user_id="u",
        amount=1500,
        bank=BankDetails("A", "123456789012", "HDFC0001234", "HDFC"),
    )
    resp = WithdrawalResponse.from_domain(w)
    assert resp.account_number_masked == "****9012"
    assert resp.amount_display == "₹1,500"
    assert "123456789012" not in resp.model_dump_json()


def test_order_paid_notification_rejects_zero_quantity() -> None:
    with pytest.raises(ValidationError):
        OrderPaidNotification(
            order_id="ORD-1",
            items=[{"line_item_id": "1", "design_id": "D-1", "unit_price": 10, "quantity": 0}],
        )
