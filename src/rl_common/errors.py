"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity / access
  2xxx: Balance / ledger
  3xxx: Design
  4xxx: Withdrawal
  5xxx: External payout provider
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error.

    `data` is rendered into the response envelope so callers get
    actionable detail (hints, retry dates) alongside the message.
    """

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        data: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.data = data
        super().__init__(message)


# --- 1xxx: Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin privileges required", 403)


class InvalidInternalTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Invalid internal API token", 401)


# --- 2xxx: Balance / ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance. Required: ₹{required}, available: ₹{available}",
            422,
            {"required": required, "available": available},
        )


class RoyaltyIntegrityError(AppError):
    """Credit target does not exist. Logged and skipped, never re-routed."""

    def __init__(self, user_id: str, order_id: str, design_id: str) -> None:
        self.user_id = user_id
        self.order_id = order_id
        self.design_id = design_id
        super().__init__(
            2003,
            f"Royalty credit target user {user_id} not found "
            f"(order={order_id}, design={design_id})",
            500,
        )


class BackfillInProgressError(AppError):
    def __init__(self) -> None:
        super().__init__(2004, "A royalty backfill is already running", 409)


# --- 3xxx: Design ---

class DesignNotFoundError(AppError):
    def __init__(self, design_id: str) -> None:
        super().__init__(3001, f"Design not found: {design_id}", 404)


# --- 4xxx: Withdrawal ---

class InvalidWithdrawalAmountError(AppError):
    def __init__(self, minimum: int) -> None:
        super().__init__(4001, f"Minimum withdrawal amount is ₹{minimum}", 422)


class InvalidBankDetailsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, detail, 422)


class WithdrawalNotFoundError(AppError):
    def __init__(self, request_id: str) -> None:
        super().__init__(4004, f"Withdrawal request not found: {request_id}", 404)


class WithdrawalConflictError(AppError):
    def __init__(self, request_id: str, status: str) -> None:
        self.status = status
        super().__init__(
            4009,
            f"Request is already {status}",
            409,
            {"request_id": request_id, "status": status},
        )


class WithdrawalCooldownError(AppError):
    def __init__(self, next_available_at: str) -> None:
        super().__init__(
            4029,
            "You can only request withdrawal once per week",
            429,
            {"next_available_at": next_available_at},
        )


# --- 5xxx: External payout provider ---

PAYOUT_RETRY_HINT = (
    "You can manually enter a transaction ID and try again, or skip automatic payout"
)


class PayoutFailedError(AppError):
    """Provider call failed; the withdrawal stays pending."""

    def __init__(self, request_id: str, provider_error: str) -> None:
        self.provider_error = provider_error
        super().__init__(
            5001,
            "Payout failed",
            502,
            {
                "request_id": request_id,
                "details": provider_error,
                "hint": PAYOUT_RETRY_HINT,
            },
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
