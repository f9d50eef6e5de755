"""
Error taxonomy for the balance and settlement engine.

Every error is a rejection of one proposed operation. The split calculator
raises them; the payment guard hands them back as values so callers can
branch on the outcome and map it to a response themselves.
"""
from decimal import Decimal
from typing import Optional


class LedgerError(ValueError):
    """Base class for all ledger rejections."""
    code = "ledger_error"
    default_message = "Operation rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.message}


class InvalidAmount(LedgerError):
    code = "invalid_amount"
    default_message = "Amount must be a finite number greater than 0"


# Split calculator

class SplitError(LedgerError):
    code = "split_error"


class EmptyParticipantSet(SplitError):
    code = "empty_participant_set"
    default_message = "At least one participant is required"


class DuplicateParticipant(SplitError):
    code = "duplicate_participant"
    default_message = "A participant may appear only once per expense"


class SplitMismatch(SplitError):
    code = "split_mismatch"
    default_message = "Split values do not add up to the expense amount"


class UnknownPolicy(SplitError):
    code = "unknown_policy"
    default_message = "Unknown split policy"


# Payment guard

class PaymentError(LedgerError):
    code = "payment_error"


class SameParticipant(PaymentError):
    code = "same_participant"
    default_message = "Sender and recipient must be different"


class NotAMember(PaymentError):
    code = "not_a_member"
    default_message = "Sender and recipient must be members of the group"


class SenderNotOwing(PaymentError):
    code = "sender_not_owing"
    default_message = "Sender does not currently owe money"


class RecipientNotOwed(PaymentError):
    code = "recipient_not_owed"
    default_message = "Recipient is not currently owed money"


class AmountExceedsOwed(PaymentError):
    code = "amount_exceeds_owed"

    def __init__(self, max_amount: Decimal):
        self.max_amount = max_amount
        super().__init__(f"Amount is too large. Maximum: {max_amount:.2f}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["max_amount"] = str(self.max_amount)
        return data
