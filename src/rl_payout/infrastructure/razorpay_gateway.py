"""Razorpay X payout gateway.

One logical payout = three provider calls: create contact, create fund
account, create payout. Any failure along the way reports the whole payout
as failed; nothing is resumed. The withdrawal id is passed as the payout
reference and as the X-Payout-Idempotency key, so a retried approval cannot
produce a second transfer on the provider side.

Amounts arrive in rupees and are sent to Razorpay in paise.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.rl_common.money import rupees_to_paise
from src.rl_payout.domain.models import BankDetails, PayoutResult

logger = logging.getLogger(__name__)

PAYOUT_NARRATION = "DropXCult Royalty Payout"


class RazorpayApiError(Exception):
    """Non-2xx response or transport failure from Razorpay."""


class RazorpayPayoutGateway:
    def __init__(
        self,
        api_key: str = settings.RAZORPAY_API_KEY,
        api_secret: str = settings.RAZORPAY_API_SECRET,
        account_number: str = settings.RAZORPAY_X_ACCOUNT_NUMBER,
        base_url: str = settings.RAZORPAY_API_BASE,
        timeout: float = settings.PAYOUT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._account_number = account_number
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport  # tests inject httpx.MockTransport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._api_secret)

    async def payout(
        self, amount: int, bank_details: BankDetails, reference_id: str
    ) -> PayoutResult:
        if not self.is_configured:
            return PayoutResult.failed("Razorpay API keys not configured")

        try:
            async with self._client() as client:
                contact = await self._request(
                    client,
                    "POST",
                    "/contacts",
                    {
                        "name": bank_details.account_name,
                        "type": "vendor",
                        "reference_id": f"withdrawal_{reference_id}",
                    },
                )
                fund_account = await self._request(
                    client,
                    "POST",
                    "/fund_accounts",
                    {
                        "contact_id": contact["id"],
                        "account_type": "bank_account",
                        "bank_account": {
                            "name": bank_details.account_name,
                            "ifsc": bank_details.ifsc_code,
                            "account_number": bank_details.account_number,
                        },
                    },
                )
                payout = await self._request(
                    client,
                    "POST",
                    "/payouts",
                    {
                        "account_number": self._account_number,
                        "fund_account_id": fund_account["id"],
                        "amount": rupees_to_paise(amount),
                        "currency": "INR",
                        "mode": "IMPS",
                        "purpose": "payout",
                        "queue_if_low_balance": True,
                        "reference_id": reference_id,
                        "narration": PAYOUT_NARRATION,
                    },
                    headers={"X-Payout-Idempotency": reference_id},
                )
        except RazorpayApiError as e:
            logger.warning(
                "Payout failed: reference=%s account=%s error=%s",
                reference_id, bank_details.masked_account_number, e,
            )
            return PayoutResult.failed(str(e))

        logger.info(
            "Payout created: reference=%s payout=%s status=%s",
            reference_id, payout.get("id"), payout.get("status"),
        )
        return PayoutResult(
            success=True,
            transaction_id=payout.get("utr") or payout.get("id"),
            payout_id=payout.get("id"),
            status=payout.get("status"),
        )

    async def get_payout_status(self, payout_id: str) -> PayoutResult:
        if not self.is_configured:
            return PayoutResult.failed("Razorpay API keys not configured")
        try:
            async with self._client() as client:
                payout = await self._request(client, "GET", f"/payouts/{payout_id}")
        except RazorpayApiError as e:
            return PayoutResult.failed(str(e))
        return PayoutResult(
            success=True,
            transaction_id=payout.get("utr"),
            payout_id=payout.get("id"),
            status=payout.get("status"),
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self._api_key, self._api_secret),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await client.request(method, path, json=body, headers=headers)
        except httpx.TimeoutException:
            raise RazorpayApiError(f"Razorpay request timed out: {method} {path}") from None
        except httpx.HTTPError as e:
            raise RazorpayApiError(f"Razorpay request failed: {e}") from None

        try:
            parsed: Any = response.json()
        except ValueError:
            parsed = None
        data: dict[str, Any] = parsed if isinstance(parsed, dict) else {}

        if response.is_error:
            error = data.get("error")
            description = error.get("description") if isinstance(error, dict) else None
            if not isinstance(description, str) or not description:
                description = f"Razorpay API error ({response.status_code})"
            raise RazorpayApiError(description)

        # Every resource this adapter reads (contact, fund account, payout) carries an id
        if not data.get("id"):
            raise RazorpayApiError(
                f"Razorpay returned an unexpected response for {method} {path}"
            )
        return data
