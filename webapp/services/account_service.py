"""
Account lifecycle: registration, e-mail verification, credentials and profile updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional
import logging
import secrets

from webapp.core.config import get_settings
from webapp.core.errors import ConflictError, EmailNotVerifiedError, NotFoundError, ValidationError
from webapp.core.security import CredentialHasher
from webapp.core.utils import as_utc, utcnow
from webapp.db.models import User
from webapp.repositories.sql_repository import AccountRepository
from webapp.services.notification_service import VerificationPublisher

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required", field_name)
    return text


@dataclass
class AccountService:
    """Creates accounts, issues and consumes verification tokens, guards writes."""

    repository: Optional[AccountRepository] = None
    hasher: Optional[CredentialHasher] = None
    publisher: Optional[VerificationPublisher] = None
    clock: Optional[Callable[[], datetime]] = None
    verification_ttl: Optional[timedelta] = field(default=None)

    def __post_init__(self):
        self.repository = self.repository or AccountRepository()
        self.hasher = self.hasher or CredentialHasher()
        self.publisher = self.publisher or VerificationPublisher()
        self.clock = self.clock or utcnow
        if self.verification_ttl is None:
            self.verification_ttl = timedelta(seconds=get_settings().email_verification_ttl_seconds)

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> datetime:
        return as_utc(self.clock())

    def _new_token(self) -> str:
        return secrets.token_urlsafe(32)

    # -------------------------------------- registration --------------------------------------
    def create_account(self, email: str, raw_password: str, first_name: str, last_name: str) -> User:
        raw_email = _require_text(email, "username")
        if not raw_password or not raw_password.strip():
            raise ValidationError("password is required", "password")
        first = _require_text(first_name, "first_name")
        last = _require_text(last_name, "last_name")
        if self.repository.email_exists(raw_email):
            raise ConflictError(f"User with email {raw_email} already exists")

        now = self._now()
        token = self._new_token()
        user = User(
            email=raw_email,
            password_hash=self.hasher.hash(raw_password),
            first_name=first,
            last_name=last,
            account_created=now,
            account_updated=now,
            verified=False,
            verification_token=token,
            verification_expiry=now + self.verification_ttl,
        )
        user = self.repository.add(user)
        logger.info("Created user %s (unverified)", raw_email, extra={"user_id": user.id})

        try:
            self.publisher.publish(user.email, token, user.first_name)
        except Exception:
            logger.error("Failed to publish verification message for %s", raw_email, exc_info=True)
        return user

    # -------------------------------------- verification --------------------------------------
    def verify_email(self, email: str, token: str) -> bool:
        user = self.repository.get_by_email(email)
        if not user:
            logger.warning("Verification requested for unknown user %s", email)
            return False
        if user.verified or user.verification_token is None:
            logger.warning("Verification token already consumed for %s", email)
            return False
        now = self._now()
        expiry = as_utc(user.verification_expiry)
        if token != user.verification_token or expiry is None or not now < expiry:
            logger.warning("Verification failed for %s: token invalid or expired", email)
            return False

        # the read above only screens; the conditional update decides
        if not self.repository.consume_verification_token(email, token, now):
            logger.warning("Verification token for %s was consumed concurrently or expired", email)
            return False
        logger.info("E-mail verified for %s", email, extra={"user_id": user.id})
        return True

    # -------------------------------------- credentials --------------------------------------
    def authenticate(self, email: str, raw_password: str) -> bool:
        user = self.repository.get_by_email(email or "")
        if not user:
            return False
        return self.hasher.verify(raw_password or "", user.password_hash)

    def require_verified(self, account: User) -> None:
        if not account.verified:
            raise EmailNotVerifiedError()

    # -------------------------------------- profile --------------------------------------
    def get_account(self, account_id: int) -> User:
        user = self.repository.get_by_id(account_id)
        if not user:
            raise NotFoundError("User", account_id)
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.repository.get_by_email(email)

    def update_profile(
        self,
        email: str,
        first_name: str,
        last_name: str,
        new_password: Optional[str] = None,
    ) -> User:
        user = self.repository.get_by_email(email)
        if not user:
            raise NotFoundError("User", email)
        user.first_name = _require_text(first_name, "first_name")
        user.last_name = _require_text(last_name, "last_name")
        if new_password is not None and new_password.strip():
            user.password_hash = self.hasher.hash(new_password)
        user.account_updated = self._now()
        saved = self.repository.save(user)
        logger.info("Updated profile for %s", email, extra={"user_id": saved.id})
        return saved
