"""
Payment endpoints.

Order creation, settlement of completed checkouts, and order status.
"""

from fastapi import APIRouter, Depends, Query

from shared.models import AuthenticatedUser
from modules.billing.exceptions import settlement_error
from modules.billing.interfaces import IBillingService
from modules.billing.models import (
    CreateOrderRequest,
    CreateOrderResponse,
    PaymentStatusResponse,
    SettlementFailure,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

from ..dependencies import get_billing_service
from ..middleware.auth import get_current_user
from ..middleware.rate_limit import rate_limit

router = APIRouter(dependencies=[Depends(rate_limit("payment"))])


@router.post("/create-order", response_model=CreateOrderResponse)
async def create_order(
    request: CreateOrderRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    billing: IBillingService = Depends(get_billing_service),
) -> CreateOrderResponse:
    """Create a provider order for a plan purchase."""
    return await billing.create_order(
        user.id,
        amount=request.amount,
        plan=request.plan,
        currency=request.currency,
    )


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    billing: IBillingService = Depends(get_billing_service),
) -> VerifyPaymentResponse:
    """
    Verify a completed checkout and activate the subscription.

    Safe to retry: a payment that was already settled is rejected with
    409 and changes nothing.
    """
    result = await billing.verify_and_settle(
        user.id,
        order_id=request.order_id,
        payment_id=request.payment_id,
        signature=request.signature,
    )
    if isinstance(result, SettlementFailure):
        raise settlement_error(result, request.payment_id)

    return VerifyPaymentResponse(
        payment_id=result.payment.payment_id,
        order_id=result.payment.order_id,
        subscription_expires_at=result.subscription_expires_at,
        amount=result.payment.amount,
        currency=result.payment.currency,
    )


@router.get("/payment-status", response_model=PaymentStatusResponse)
async def payment_status(
    order_id: str = Query(..., alias="orderId", min_length=1),
    user: AuthenticatedUser = Depends(get_current_user),
    billing: IBillingService = Depends(get_billing_service),
) -> PaymentStatusResponse:
    """Get an order's provider status and the user's subscription status."""
    return await billing.get_payment_status(user.id, order_id)
