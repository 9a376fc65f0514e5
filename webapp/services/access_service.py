"""Explicit authorization gate invoked at the start of every protected operation."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from webapp.core.errors import EmailNotVerifiedError, UnauthorizedError
from webapp.db.models import User
from webapp.services.account_service import AccountService

logger = logging.getLogger(__name__)


class AccessOutcome(str, enum.Enum):
    GRANTED = "granted"
    UNAUTHENTICATED = "unauthenticated"
    UNVERIFIED = "unverified"


@dataclass(frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    account: Optional[User] = None

    @property
    def granted(self) -> bool:
        return self.outcome is AccessOutcome.GRANTED


class AccessService:
    """Turn presented credentials into a typed access decision."""

    def __init__(self, accounts: AccountService | None = None) -> None:
        self.accounts = accounts or AccountService()

    def authorize(self, email: Optional[str], password: Optional[str], *, require_verified: bool = True) -> AccessDecision:
        if not email or password is None:
            return AccessDecision(AccessOutcome.UNAUTHENTICATED)
        if not self.accounts.authenticate(email, password):
            logger.warning("Rejected credentials for %s", email)
            return AccessDecision(AccessOutcome.UNAUTHENTICATED)
        account = self.accounts.find_by_email(email)
        if not account:
            return AccessDecision(AccessOutcome.UNAUTHENTICATED)
        if require_verified and not account.verified:
            return AccessDecision(AccessOutcome.UNVERIFIED, account)
        return AccessDecision(AccessOutcome.GRANTED, account)

    def require(self, email: Optional[str], password: Optional[str], *, require_verified: bool = True) -> User:
        """Like authorize() but raises UnauthorizedError / EmailNotVerifiedError."""
        decision = self.authorize(email, password, require_verified=require_verified)
        if decision.outcome is AccessOutcome.UNAUTHENTICATED:
            raise UnauthorizedError("Invalid or missing credentials")
        if decision.outcome is AccessOutcome.UNVERIFIED:
            raise EmailNotVerifiedError()
        return decision.account
