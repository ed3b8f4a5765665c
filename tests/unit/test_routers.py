"""HTTP-level tests: auth guards, envelopes and error rendering.

Services are replaced on the router modules; no database is touched.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.main import app
from src.rl_admin.api import router as admin_api
from src.rl_common.database import get_db_session
from src.rl_common.enums import DesignKind
from src.rl_common.errors import PayoutFailedError, WithdrawalConflictError
from src.rl_design.api import router as design_api
from src.rl_design.domain.models import DesignRef
from src.rl_gateway.auth.dependencies import get_current_user
from src.rl_gateway.user.db_models import UserModel
from src.rl_royalty.api import router as royalty_api
from src.rl_royalty.application.schemas import BalanceResponse
from src.rl_royalty.domain.models import OrderCreditSummary
from src.rl_withdrawal.api import admin_router as admin_withdrawal_api
from src.rl_withdrawal.application.schemas import WithdrawalDecisionResponse

INTERNAL = {"X-Internal-Token": "test-internal-token"}


def _user(is_admin: bool = False) -> UserModel:
    return UserModel(
        id=uuid.uuid4(), name="Asha", email="asha@example.com", is_active=True, is_admin=is_admin
    )


async def _fake_db():
    yield AsyncMock()


@pytest.fixture
def as_user():
    def _login(is_admin: bool = False) -> UserModel:
        user = _user(is_admin)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    app.dependency_overrides[get_db_session] = _fake_db
    yield _login
    app.dependency_overrides.clear()


async def test_health(client) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestOrderPaidNotification:
    async def test_missing_internal_token(self, client, as_user) -> None:
        resp = await client.post("/api/v1/royalty/sales", json={"order_id": "ORD-1"})
        assert resp.status_code == 401
        assert resp.json()["code"] == 1007

    async def test_wrong_internal_token(self, client, as_user) -> None:
        resp = await client.post(
            "/api/v1/royalty/sales",
            json={"order_id": "ORD-1"},
            headers={"X-Internal-Token": "nope"},
        )
        assert resp.status_code == 401

    async def test_credits_order(self, client, as_user, monkeypatch) -> None:
        svc = MagicMock()
        svc.credit_paid_order = AsyncMock(
            return_value=OrderCreditSummary(order_id="ORD-1", entries_created=1, amount_credited=200)
        )
        monkeypatch.setattr(royalty_api, "_service", svc)

        resp = await client.post(
            "/api/v1/royalty/sales",
            json={
                "order_id": "ORD-1",
                "buyer_id": "buyer-1",
                "items": [{"line_item_id": "1", "design_id": "D-1", "unit_price": 1000, "quantity": 2}],
            },
            headers=INTERNAL,
        )

        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["data"]["amount_credited"] == 200
        order = svc.credit_paid_order.await_args.args[1]
        assert order.is_paid is True
        assert order.items[0].quantity == 2


class TestRoyaltyReads:
    async def test_balance_requires_token(self, client) -> None:
        resp = await client.get("/api/v1/royalty/balance")
        assert resp.status_code == 401

    async def test_balance(self, client, as_user, monkeypatch) -> None:
        user = as_user()
        svc = MagicMock()
        svc.get_balance = AsyncMock(
            return_value=BalanceResponse.from_amounts(str(user.id), 1500, 2000)
        )
        monkeypatch.setattr(royalty_api, "_service", svc)

        resp = await client.get("/api/v1/royalty/balance")

        assert resp.status_code == 200
        assert resp.json()["data"]["points_display"] == "₹1,500"
        assert resp.json()["request_id"].startswith("req_")

    async def test_ledger_rejects_unknown_entry_type(self, client, as_user) -> None:
        as_user()
        resp = await client.get("/api/v1/royalty/ledger", params={"entry_type": "DEPOSIT"})
        assert resp.status_code == 422


class TestDesignOwner:
    async def test_owner_lookup(self, client, as_user, monkeypatch) -> None:
        as_user()
        resolver = MagicMock()
        resolver.require_owner = AsyncMock(
            return_value=DesignRef("D-1", DesignKind.RICH, "designer-1", "approved", True, False)
        )
        monkeypatch.setattr(design_api, "_resolver", resolver)

        resp = await client.get("/api/v1/designs/D-1/owner")

        data = resp.json()["data"]
        assert data["owner_id"] == "designer-1"
        assert data["kind"] == "RICH"
        assert data["is_eligible"] is True


class TestAdminWithdrawals:
    async def test_non_admin_forbidden(self, client, as_user) -> None:
        as_user(is_admin=False)
        resp = await client.patch("/api/v1/admin/withdrawals/W-1", json={"action": "reject"})
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006

    async def test_invalid_action(self, client, as_user) -> None:
        as_user(is_admin=True)
        resp = await client.patch("/api/v1/admin/withdrawals/W-1", json={"action": "cancel"})
        assert resp.status_code == 422

    async def test_approve(self, client, as_user, monkeypatch) -> None:
        admin = as_user(is_admin=True)
        svc = MagicMock()
        svc.decide = AsyncMock(
            return_value=WithdrawalDecisionResponse(
                id="W-1", status="processed", transaction_id="UTR1",
                payout_status="processing", message="Withdrawal approved and payout initiated via Razorpay",
            )
        )
        monkeypatch.setattr(admin_withdrawal_api, "_service", svc)

        resp = await client.patch("/api/v1/admin/withdrawals/W-1", json={"action": "approve"})

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "processed"
        assert svc.decide.await_args.args[2] == str(admin.id)

    async def test_payout_failure_renders_hint(self, client, as_user, monkeypatch) -> None:
        as_user(is_admin=True)
        svc = MagicMock()
        svc.decide = AsyncMock(side_effect=PayoutFailedError("W-1", "Account blocked"))
        monkeypatch.setattr(admin_withdrawal_api, "_service", svc)

        resp = await client.patch("/api/v1/admin/withdrawals/W-1", json={"action": "approve"})

        body = resp.json()
        assert resp.status_code == 502
        assert body["code"] == 5001
        assert body["data"]["details"] == "Account blocked"
        assert "hint" in body["data"]

    async def test_conflict(self, client, as_user, monkeypatch) -> None:
        as_user(is_admin=True)
        svc = MagicMock()
        svc.decide = AsyncMock(side_effect=WithdrawalConflictError("W-1", "rejected"))
        monkeypatch.setattr(admin_withdrawal_api, "_service", svc)

        resp = await client.patch("/api/v1/admin/withdrawals/W-1", json={"action": "reject"})

        assert resp.status_code == 409
        assert resp.json()["message"] == "Request is already rejected"


class TestUserWithdrawals:
    async def test_rejects_zero_amount(self, client, as_user) -> None:
        as_user()
        resp = await client.post(
            "/api/v1/withdrawals",
            json={
                "amount": 0,
                "account_name": "Asha",
                "account_number": "123456789012",
                "ifsc_code": "HDFC0001234",
                "bank_name": "HDFC",
            },
        )
        assert resp.status_code == 422


class TestAdminRoyalty:
    async def test_invariants(self, client, as_user, monkeypatch) -> None:
        as_user(is_admin=True)
        svc = MagicMock()
        svc.verify_all_invariants = AsyncMock(return_value={"ok": True, "violations": []})
        monkeypatch.setattr(admin_api, "_service", svc)

        resp = await client.get("/api/v1/admin/royalty/invariants")

        assert resp.status_code == 200
        assert resp.json()["data"]["ok"] is True

    async def test_backfill_requires_admin(self, client, as_user) -> None:
        as_user(is_admin=False)
        resp = await client.post("/api/v1/admin/royalty/backfill")
        assert resp.status_code == 403
