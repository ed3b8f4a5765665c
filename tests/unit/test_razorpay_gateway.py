"""Tests for RazorpayPayoutGateway using httpx.MockTransport."""

import json

import httpx
import pytest

from src.rl_payout.domain.models import BankDetails
from src.rl_payout.infrastructure.razorpay_gateway import RazorpayPayoutGateway

BANK = BankDetails("Asha Rao", "123456789012", "HDFC0001234", "HDFC Bank")


def _gateway(handler, **kwargs) -> RazorpayPayoutGateway:
    return RazorpayPayoutGateway(
        api_key=kwargs.get("api_key", "rzp_test_key"),
        api_secret=kwargs.get("api_secret", "secret"),
        account_number="2323230000000000",
        base_url="https://api.razorpay.test/v1",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class Recorder:
    def __init__(self, responses: dict[str, httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses[request.url.path]


def _happy() -> Recorder:
    return Recorder(
        {
            "/v1/contacts": httpx.Response(200, json={"id": "cont_1"}),
            "/v1/fund_accounts": httpx.Response(200, json={"id": "fa_1"}),
            "/v1/payouts": httpx.Response(
                200, json={"id": "pout_1", "status": "processing", "utr": None}
            ),
        }
    )


class TestPayout:
    async def test_three_calls_in_order(self) -> None:
        rec = _happy()

        result = await _gateway(rec).payout(500, BANK, "W-1")

        assert result.success is True
        assert result.payout_id == "pout_1"
        assert result.transaction_id == "pout_1"  # no UTR yet
        assert [r.url.path for r in rec.requests] == [
            "/v1/contacts", "/v1/fund_accounts", "/v1/payouts",
        ]

    async def test_amount_in_paise_and_idempotency_key(self) -> None:
        rec = _happy()

        await _gateway(rec).payout(500, BANK, "W-1")

        payout_req = rec.requests[2]
        body = json.loads(payout_req.content)
        assert body["amount"] == 50000
        assert body["currency"] == "INR"
        assert body["reference_id"] == "W-1"
        assert body["fund_account_id"] == "fa_1"
        assert payout_req.headers["X-Payout-Idempotency"] == "W-1"
        assert payout_req.headers["Authorization"].startswith("Basic ")

    async def test_provider_error_description_surfaces(self) -> None:
        rec = _happy()
        rec.responses["/v1/fund_accounts"] = httpx.Response(
            400, json={"error": {"description": "Invalid IFSC Code"}}
        )

        result = await _gateway(rec).payout(500, BANK, "W-1")

        assert result.success is False
        assert result.error == "Invalid IFSC Code"
        assert len(rec.requests) == 2

    async def test_error_without_body(self) -> None:
        rec = _happy()
        rec.responses["/v1/payouts"] = httpx.Response(503, text="unavailable")

        result = await _gateway(rec).payout(500, BANK, "W-1")

        assert result.success is False
        assert "503" in result.error

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>ok</html>"),
            httpx.Response(200, json={}),
            httpx.Response(200, json=["cont_1"]),
            httpx.Response(200, text='{"id": "cont'),
        ],
    )
    async def test_success_status_without_id_is_failure(self, response) -> None:
        rec = _happy()
        rec.responses["/v1/contacts"] = response

        result = await _gateway(rec).payout(500, BANK, "W-1")

        assert result.success is False
        assert "unexpected response" in result.error
        assert len(rec.requests) == 1

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, json={"error": "boom"}),
            httpx.Response(500, json={"error": {"description": 42}}),
            httpx.Response(500, json=[{"error": "boom"}]),
        ],
    )
    async def test_malformed_error_body_is_failure(self, response) -> None:
        rec = _happy()
        rec.responses["/v1/payouts"] = response

        result = await _gateway(rec).payout(500, BANK, "W-1")

        assert result.success is False
        assert result.error == "Razorpay API error (500)"

    async def test_timeout_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = await _gateway(handler).payout(500, BANK, "W-1")

        assert result.success is False
        assert "timed out" in result.error

    async def test_unconfigured_keys(self) -> None:
        rec = _happy()

        result = await _gateway(rec, api_key="", api_secret="").payout(500, BANK, "W-1")

        assert result.success is False
        assert result.error == "Razorpay API keys not configured"
        assert rec.requests == []


class TestPayoutStatus:
    async def test_returns_utr(self) -> None:
        rec = Recorder(
            {
                "/v1/payouts/pout_1": httpx.Response(
                    200, json={"id": "pout_1", "status": "processed", "utr": "UTR42"}
                )
            }
        )

        result = await _gateway(rec).get_payout_status("pout_1")

        assert result.status == "processed"
        assert result.transaction_id == "UTR42"
        assert rec.requests[0].method == "GET"

    async def test_not_found(self) -> None:
        rec = Recorder(
            {"/v1/payouts/nope": httpx.Response(404, json={"error": {"description": "Not found"}})}
        )

        result = await _gateway(rec).get_payout_status("nope")

        assert result.success is False
        assert result.error == "Not found"


@pytest.mark.parametrize("key,secret,expected", [("k", "s", True), ("", "s", False), ("k", "", False)])
def test_is_configured(key: str, secret: str, expected: bool) -> None:
    assert _gateway(_happy(), api_key=key, api_secret=secret).is_configured is expected
