"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class DesignKind(str, Enum):
    """Which historical design table a design id was found in."""
    FLAT = "FLAT"  # custom_requests
    RICH = "RICH"  # designs (3D editor)


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not WithdrawalStatus.PENDING


class WithdrawalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class LedgerEntryType(str, Enum):
    ROYALTY_CREDIT = "ROYALTY_CREDIT"
    WITHDRAWAL_DEBIT = "WITHDRAWAL_DEBIT"
    WITHDRAWAL_REVERSAL = "WITHDRAWAL_REVERSAL"


class ReferenceType(str, Enum):
    ROYALTY_ENTRY = "ROYALTY_ENTRY"
    WITHDRAWAL = "WITHDRAWAL"
