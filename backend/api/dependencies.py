"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The container is built once by create_app() and stored on
``app.state.container``; route dependencies read it from the request.
Tests build their own container with in-memory storage and fakes.
"""

from typing import TYPE_CHECKING, Optional

from fastapi import Request

from shared.config import Settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from supabase import Client
    from modules.auth.interfaces import IAuthService, IUserRepository
    from modules.auth.tokens import Clock, TokenIssuer
    from modules.billing.interfaces import IBillingService, IPaymentGateway, IPaymentRepository
    from modules.entitlements.cache import EntitlementCache
    from modules.entitlements.gate import RequestGate
    from modules.entitlements.ledger import EntitlementLedger
    from modules.entitlements.summary import UsageSummaryService
    from modules.transform.interfaces import ITextTransformer
    from modules.transform.service import TransformationService
    from modules.usage.interfaces import IUsageRecorder, IUsageRepository
    from .middleware.rate_limit import RateLimiter


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached for the life
    of the container. Storage and external collaborators can be passed
    in; anything not passed is built from settings.

    Args:
        settings: Application settings
        users / payments / usage_repository: Storage overrides
        gateway: Payment provider override
        transformer: Text-completion override
        clock: Source of "now" for tokens, ledger and billing
    """

    def __init__(
        self,
        settings: Settings,
        users: "Optional[IUserRepository]" = None,
        payments: "Optional[IPaymentRepository]" = None,
        usage_repository: "Optional[IUsageRepository]" = None,
        gateway: "Optional[IPaymentGateway]" = None,
        transformer: "Optional[ITextTransformer]" = None,
        clock: "Optional[Clock]" = None,
    ) -> None:
        self.settings = settings
        self._clock = clock
        self._db: "Client | None" = None
        self._users = users
        self._payments = payments
        self._usage_repository = usage_repository
        self._gateway = gateway
        self._transformer = transformer
        self._token_issuer: "TokenIssuer | None" = None
        self._auth: "IAuthService | None" = None
        self._cache: "EntitlementCache | None" = None
        self._ledger: "EntitlementLedger | None" = None
        self._gate: "RequestGate | None" = None
        self._recorder: "IUsageRecorder | None" = None
        self._billing: "IBillingService | None" = None
        self._summary: "UsageSummaryService | None" = None
        self._transformation: "TransformationService | None" = None
        self._rate_limiters: "dict[str, RateLimiter] | None" = None

    @property
    def uses_memory_storage(self) -> bool:
        return self.settings.storage_backend == "memory"

    @property
    def db(self) -> "Client":
        """Get the Supabase client (supabase storage only)."""
        if self._db is None:
            from shared.database import create_supabase_client
            self._db = create_supabase_client(self.settings)
        return self._db

    # Storage

    @property
    def users(self) -> "IUserRepository":
        if self._users is None:
            from modules.auth.repository import InMemoryUserRepository, SupabaseUserRepository
            if self.uses_memory_storage:
                self._users = InMemoryUserRepository()
            else:
                self._users = SupabaseUserRepository(self.db)
        return self._users

    @property
    def payments(self) -> "IPaymentRepository":
        if self._payments is None:
            from modules.billing.repository import InMemoryPaymentRepository, SupabasePaymentRepository
            if self.uses_memory_storage:
                self._payments = InMemoryPaymentRepository()
            else:
                self._payments = SupabasePaymentRepository(self.db)
        return self._payments

    @property
    def usage_repository(self) -> "IUsageRepository":
        if self._usage_repository is None:
            from modules.usage.repository import InMemoryUsageRepository, SupabaseUsageRepository
            if self.uses_memory_storage:
                self._usage_repository = InMemoryUsageRepository()
            else:
                self._usage_repository = SupabaseUsageRepository(self.db)
        return self._usage_repository

    # External collaborators

    @property
    def gateway(self) -> "IPaymentGateway":
        """Get the payment gateway client."""
        if self._gateway is None:
            from modules.billing.gateway import RazorpayGateway
            self._gateway = RazorpayGateway(
                key_id=self.settings.razorpay_key_id,
                key_secret=self.settings.razorpay_key_secret,
                api_url=self.settings.razorpay_api_url,
                timeout=self.settings.payment_http_timeout,
                retries=self.settings.payment_http_retries,
            )
        return self._gateway

    @property
    def transformer(self) -> "ITextTransformer":
        """Get the text-completion client."""
        if self._transformer is None:
            from modules.transform.service import LangChainTextTransformer
            self._transformer = LangChainTextTransformer(
                api_key=self.settings.openai_api_key,
                model=self.settings.openai_model,
                max_tokens=self.settings.llm_max_tokens,
                max_retries=self.settings.llm_max_retries,
                timeout=self.settings.llm_timeout,
            )
        return self._transformer

    # Services

    @property
    def token_issuer(self) -> "TokenIssuer":
        if self._token_issuer is None:
            from datetime import timedelta
            from modules.auth.tokens import TokenIssuer
            self._token_issuer = TokenIssuer(
                secret=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
                ttl=timedelta(days=self.settings.token_ttl_days),
                clock=self._clock,
            )
        return self._token_issuer

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth is None:
            from modules.auth.service import AuthService
            self._auth = AuthService(self.users, self.token_issuer, clock=self._clock)
        return self._auth

    @property
    def cache(self) -> "EntitlementCache":
        if self._cache is None:
            from modules.entitlements.cache import EntitlementCache
            self._cache = EntitlementCache(
                ttl=self.settings.entitlement_cache_ttl,
                maxsize=self.settings.entitlement_cache_maxsize,
            )
        return self._cache

    @property
    def ledger(self) -> "EntitlementLedger":
        if self._ledger is None:
            from modules.entitlements.ledger import EntitlementLedger
            self._ledger = EntitlementLedger(
                self.users,
                cache=self.cache,
                trial_limit=self.settings.free_trial_limit,
                clock=self._clock,
            )
        return self._ledger

    @property
    def gate(self) -> "RequestGate":
        if self._gate is None:
            from modules.entitlements.gate import RequestGate
            self._gate = RequestGate(self.auth, self.ledger)
        return self._gate

    @property
    def recorder(self) -> "IUsageRecorder":
        if self._recorder is None:
            from modules.usage.service import UsageRecorder
            self._recorder = UsageRecorder(self.usage_repository)
        return self._recorder

    @property
    def billing(self) -> "IBillingService":
        """Get the billing service instance."""
        if self._billing is None:
            from modules.billing.service import BillingService
            self._billing = BillingService(
                gateway=self.gateway,
                payments=self.payments,
                ledger=self.ledger,
                users=self.users,
                key_secret=self.settings.razorpay_key_secret,
                clock=self._clock,
            )
        return self._billing

    @property
    def summary(self) -> "UsageSummaryService":
        if self._summary is None:
            from modules.entitlements.summary import UsageSummaryService
            self._summary = UsageSummaryService(
                ledger=self.ledger,
                cache=self.cache,
                recorder=self.recorder,
                payments=self.billing,
            )
        return self._summary

    @property
    def transformation(self) -> "TransformationService":
        if self._transformation is None:
            from modules.transform.service import TransformationService
            self._transformation = TransformationService(
                transformer=self.transformer,
                recorder=self.recorder,
                ledger=self.ledger,
            )
        return self._transformation

    @property
    def rate_limiters(self) -> "dict[str, RateLimiter]":
        if self._rate_limiters is None:
            from .middleware.rate_limit import build_rate_limiters
            self._rate_limiters = build_rate_limiters(self.settings)
        return self._rate_limiters

    async def aclose(self) -> None:
        """Release network clients. Called from the app lifespan."""
        if self._gateway is not None:
            await self._gateway.aclose()


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the app's service container."""
    return request.app.state.container


def get_auth_service(request: Request) -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container(request).auth


def get_billing_service(request: Request) -> "IBillingService":
    """FastAPI dependency for billing service."""
    return get_container(request).billing


def get_ledger(request: Request) -> "EntitlementLedger":
    """FastAPI dependency for the entitlement ledger."""
    return get_container(request).ledger


def get_summary_service(request: Request) -> "UsageSummaryService":
    """FastAPI dependency for usage summaries."""
    return get_container(request).summary


def get_transformation_service(request: Request) -> "TransformationService":
    """FastAPI dependency for text transformation."""
    return get_container(request).transformation
