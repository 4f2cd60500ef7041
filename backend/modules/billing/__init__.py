"""
Billing module.

Handles plan orders with the payment provider and settlement of
completed payments into subscriptions.

Public API:
- IBillingService / BillingService: create_order, verify_and_settle,
  get_payment_status, list_payments
- IPaymentGateway / RazorpayGateway
- IPaymentRepository (in-memory and Supabase implementations)
- SettlementOk / SettlementFailure results and billing exceptions
"""

from .interfaces import IBillingService, IPaymentGateway, IPaymentRepository
from .models import (
    CURRENCY,
    PLANS,
    Plan,
    PaymentRecord,
    PaymentStatus,
    ProviderOrder,
    ProviderPayment,
    SettlementFailureKind,
    SettlementOk,
    SettlementFailure,
    SettlementResult,
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    PaymentStatusResponse,
)
from .exceptions import (
    InvalidAmountError,
    InvalidPlanError,
    AlreadyProcessedError,
    InvalidSignatureError,
    OrderOwnershipMismatchError,
    PaymentNotCompletedError,
    PaymentGatewayError,
    DuplicatePaymentError,
    settlement_error,
)
from .gateway import RazorpayGateway
from .repository import InMemoryPaymentRepository, SupabasePaymentRepository
from .service import BillingService, compute_signature, build_receipt

__all__ = [
    # Interfaces
    "IBillingService",
    "IPaymentGateway",
    "IPaymentRepository",
    # Models
    "CURRENCY",
    "PLANS",
    "Plan",
    "PaymentRecord",
    "PaymentStatus",
    "ProviderOrder",
    "ProviderPayment",
    "SettlementFailureKind",
    "SettlementOk",
    "SettlementFailure",
    "SettlementResult",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    "PaymentStatusResponse",
    # Exceptions
    "InvalidAmountError",
    "InvalidPlanError",
    "AlreadyProcessedError",
    "InvalidSignatureError",
    "OrderOwnershipMismatchError",
    "PaymentNotCompletedError",
    "PaymentGatewayError",
    "DuplicatePaymentError",
    "settlement_error",
    # Implementations
    "RazorpayGateway",
    "InMemoryPaymentRepository",
    "SupabasePaymentRepository",
    "BillingService",
    "compute_signature",
    "build_receipt",
]
