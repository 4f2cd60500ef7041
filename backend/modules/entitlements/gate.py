"""
Request gate.

Runs the checks every billable request goes through, in order:
token verification, account status, then the ledger decision. The
decision always comes from the ledger, never from the cache, and the
gate never consumes a trial itself.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from shared.models import AuthenticatedUser
from modules.auth.interfaces import IAuthService
from modules.auth.exceptions import AccountInactiveError, UserNotFoundError

from .ledger import EntitlementLedger
from .models import Allowed, Decision, EntitlementReason
from .exceptions import EntitlementExceededError

logger = logging.getLogger(__name__)


class GateContext(BaseModel):
    """
    What an admitted request carries to its handler.

    The handler and the usage-recording step use ``is_subscribed`` to
    decide whether the attempt consumes a trial.
    """

    user: AuthenticatedUser
    decision: Decision

    model_config = {"frozen": True}

    @property
    def is_subscribed(self) -> bool:
        return self.decision.reason is EntitlementReason.SUBSCRIBED

    @property
    def remaining_trials(self) -> Optional[int]:
        if isinstance(self.decision, Allowed):
            return self.decision.remaining_trials
        return 0


class RequestGate:
    """Authenticates a request token and resolves its entitlement."""

    def __init__(self, auth: IAuthService, ledger: EntitlementLedger):
        self._auth = auth
        self._ledger = ledger

    async def evaluate(self, token: Optional[str]) -> GateContext:
        """
        Authenticate and decide without enforcing the decision.

        Raises:
            AuthenticationRequiredError: If the token is missing or malformed
            InvalidTokenError: If verification fails
            AccountInactiveError: If the account is missing or inactive
        """
        user = await self._auth.authenticate(token)
        try:
            decision = await self._ledger.can_use_service(user.id)
        except UserNotFoundError:
            # Deleted between authentication and the ledger read
            raise AccountInactiveError()
        return GateContext(user=user, decision=decision)

    async def admit(self, token: Optional[str]) -> GateContext:
        """
        Authenticate, decide, and reject denied requests.

        Raises:
            EntitlementExceededError: If the user has no entitlement left
            (plus everything evaluate() raises)
        """
        context = await self.evaluate(token)
        if not context.decision.allowed:
            logger.info(f"Denied request for user {context.user.id}: {context.decision.reason.value}")
            raise EntitlementExceededError(context.decision.reason, context.decision.message)
        return context
