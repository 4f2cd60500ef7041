"""
Billing module exceptions.

These exceptions are raised by the billing module and can be caught
by API error handlers to return appropriate HTTP responses.

Settlement outcomes are returned as SettlementFailure values by the
service; the API turns each failure kind into the matching error here.
"""

from decimal import Decimal
from typing import Optional

from shared.exceptions import (
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    ValidationError,
)

from .models import SettlementFailure, SettlementFailureKind


class InvalidAmountError(ValidationError):
    """Raised when an order amount is out of range or off-price."""

    def __init__(self, amount: Decimal, reason: str):
        super().__init__(
            f"Invalid amount: {amount}. {reason}",
            code="INVALID_AMOUNT",
            details={"amount": str(amount), "reason": reason},
        )


class InvalidPlanError(ValidationError):
    """Raised when an order names an unknown plan or currency."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_PLAN")


class AlreadyProcessedError(ConflictError):
    """Raised when a payment id has already been settled."""

    def __init__(self, payment_id: str):
        super().__init__(
            "Payment has already been processed",
            code="ALREADY_PROCESSED",
            details={"payment_id": payment_id},
        )


class InvalidSignatureError(ValidationError):
    """Raised when the checkout signature does not match."""

    def __init__(self):
        super().__init__("Invalid payment signature", code="INVALID_SIGNATURE")


class OrderOwnershipMismatchError(AuthorizationError):
    """Raised when settling an order created for another user."""

    def __init__(self):
        super().__init__(
            "Order does not belong to this user",
            code="ORDER_OWNERSHIP_MISMATCH",
        )


class PaymentNotCompletedError(ValidationError):
    """Raised when the provider does not report the payment as paid."""

    def __init__(self, message: str = "Payment not completed"):
        super().__init__(message, code="PAYMENT_NOT_COMPLETED")


class PaymentGatewayError(ExternalServiceError):
    """Raised when the payment provider is unreachable or errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            service="razorpay",
            code="PAYMENT_GATEWAY_ERROR",
            details={"status_code": status_code} if status_code else {},
        )


class DuplicatePaymentError(Exception):
    """
    Raised by payment repositories on a payment_id unique violation.

    Internal to the billing module; settlement reports it as
    ALREADY_PROCESSED.
    """

    def __init__(self, payment_id: str):
        super().__init__(f"Duplicate payment: {payment_id}")
        self.payment_id = payment_id


def settlement_error(failure: SettlementFailure, payment_id: str):
    """Map a settlement failure to the error the API raises for it."""
    if failure.kind is SettlementFailureKind.ALREADY_PROCESSED:
        return AlreadyProcessedError(payment_id)
    if failure.kind is SettlementFailureKind.INVALID_SIGNATURE:
        return InvalidSignatureError()
    if failure.kind is SettlementFailureKind.ORDER_OWNERSHIP_MISMATCH:
        return OrderOwnershipMismatchError()
    return PaymentNotCompletedError(failure.message)
