"""
User lifecycle use cases: registration, activation, password recovery and
password changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Optional, TypeVar
import logging
import secrets
import time

from phonebook.core.config import Settings, get_settings
from phonebook.core.mailer import EmailSender, SmtpMailer
from phonebook.core.security import Argon2PasswordHasher, PasswordHasher
from phonebook.core.utils import absolute_url, normalize_email
from phonebook.db.models import ActivationToken, Contact, RecoveryToken, User
from phonebook.repositories.base import (
    ActivationTokenRepository,
    ContactRepository,
    RecoveryTokenRepository,
    UserRepository,
)
from phonebook.repositories.sql_repository import (
    SQLActivationTokenRepository,
    SQLContactRepository,
    SQLRecoveryTokenRepository,
    SQLUserRepository,
)

logger = logging.getLogger("phonebook.users")

ACTIVATION_SUBJECT = "Activation of your phonebook account"
RECOVERY_SUBJECT = "Password recovery"
ACTIVATION_PATH = "/api/user/activation/{token}"
RECOVERY_PATH = "/password/recovery/{token}"

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"


class UserServiceError(Exception):
    """Base class for user-facing domain errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserAlreadyExistsError(UserServiceError):
    kind = ErrorKind.ALREADY_EXISTS


class NotFoundError(UserServiceError):
    kind = ErrorKind.NOT_FOUND


@dataclass
class Result(Generic[T]):
    """Outcome of a service call: a value, or the domain error that prevented it."""

    value: Optional[T] = None
    error: Optional[UserServiceError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: UserServiceError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


@dataclass
class Registration:
    email: str
    activation_token: str
    activation_url: str


def _new_token() -> str:
    return secrets.token_urlsafe(24)


@dataclass
class UserService:
    """Orchestrates the user repositories, the mailer and the password hasher."""

    users: UserRepository
    activation_tokens: ActivationTokenRepository
    recovery_tokens: RecoveryTokenRepository
    contacts: ContactRepository
    mailer: EmailSender
    hasher: PasswordHasher
    settings: Settings = field(default_factory=get_settings)

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> int:
        return int(time.time())

    def _token_expired(self, created_at: datetime | int | None, now: int, *, ttl_seconds: int) -> bool:
        if ttl_seconds <= 0:
            return False
        if isinstance(created_at, datetime):
            # SQLite hands back naive datetimes; they were stored as UTC.
            normalized = created_at.astimezone(timezone.utc) if created_at.tzinfo else created_at.replace(tzinfo=timezone.utc)
            created_ts = int(normalized.timestamp())
        else:
            created_ts = int(created_at or 0)
        if not created_ts:
            return True
        return (created_ts + ttl_seconds) < now

    def _token_owner(
        self,
        entity: ActivationToken | RecoveryToken,
        repository: ActivationTokenRepository | RecoveryTokenRepository,
    ) -> Optional[User]:
        user = self.users.find_by_id(entity.user_email or "")
        if user is None:
            logger.warning("Token points to missing user %s; discarding it", entity.user_email)
            repository.delete(entity.token)
        return user

    # -------------------------------------- registration --------------------------------------
    def add_user(self, email: str, raw_password: str) -> Result[Registration]:
        normalized = normalize_email(email)
        if self.users.find_by_id(normalized) is not None:
            logger.info("Registration refused, %s already exists", normalized)
            return Result.failure(UserAlreadyExistsError("Error! User already exists"))

        user = self.users.save(User(email=normalized, password=self.hasher.encode(raw_password), is_active=False))
        token = self.activation_tokens.save(
            ActivationToken(token=_new_token(), user_email=user.email, created_at=datetime.now(timezone.utc))
        )
        activation_url = absolute_url(ACTIVATION_PATH.format(token=token.token), base=self.settings.public_base_url)
        self.mailer.send_mail(
            user.email,
            ACTIVATION_SUBJECT,
            f"Welcome to your phonebook! Activate your account by following this link: {activation_url}",
        )
        logger.info("Registered %s, activation mail sent", user.email)
        return Result.success(Registration(email=user.email, activation_token=token.token, activation_url=activation_url))

    def activate_user(self, token: str) -> Result[User]:
        token_value = (token or "").strip()
        entity = self.activation_tokens.find_by_id(token_value) if token_value else None
        if entity is None:
            return Result.failure(NotFoundError("Error! This link is not active anymore"))
        if self._token_expired(entity.created_at, self._now(), ttl_seconds=self.settings.activation_token_ttl_seconds):
            self.activation_tokens.delete(entity.token)
            return Result.failure(NotFoundError("Error! This link is not active anymore"))
        user = self._token_owner(entity, self.activation_tokens)
        if user is None:
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        user.is_active = True
        user = self.users.save(user)
        self.activation_tokens.delete(entity.token)
        logger.info("Activated %s", user.email)
        return Result.success(user)

    # -------------------------------------- recovery --------------------------------------
    def send_recovery_token(self, email: str) -> Result[str]:
        user = self.users.find_by_id(normalize_email(email))
        if user is None:
            logger.info("Recovery requested for unknown address %s", email)
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        token = self.recovery_tokens.save(
            RecoveryToken(token=_new_token(), user_email=user.email, created_at=datetime.now(timezone.utc))
        )
        recovery_url = absolute_url(RECOVERY_PATH.format(token=token.token), base=self.settings.public_base_url)
        self.mailer.send_mail(
            user.email,
            RECOVERY_SUBJECT,
            f"We received a request to reset your password. Follow this link to choose a new one: {recovery_url}",
        )
        logger.info("Recovery mail sent to %s", user.email)
        return Result.success(token.token)

    def create_new_password(self, token: str, new_password: str) -> Result[User]:
        token_value = (token or "").strip()
        entity = self.recovery_tokens.find_by_id(token_value) if token_value else None
        if entity is None:
            return Result.failure(NotFoundError("Error! This link is not valid anymore"))
        if self._token_expired(entity.created_at, self._now(), ttl_seconds=self.settings.recovery_token_ttl_seconds):
            self.recovery_tokens.delete(entity.token)
            return Result.failure(NotFoundError("Error! This link is not valid anymore"))
        user = self._token_owner(entity, self.recovery_tokens)
        if user is None:
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        # Stored as provided; callers hand in the value to persist.
        user.password = new_password
        user = self.users.save(user)
        self.recovery_tokens.delete(entity.token)
        logger.info("Password reset through recovery link for %s", user.email)
        return Result.success(user)

    # -------------------------------------- account --------------------------------------
    def change_password_authorized_user(self, email: str, new_password: str) -> Result[User]:
        user = self.users.find_by_id(email)
        if user is None:
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        user.password = self.hasher.encode(new_password)
        user = self.users.save(user)
        logger.info("Password changed for %s", user.email)
        return Result.success(user)

    def get_user_by_email(self, email: str) -> Result[User]:
        user = self.users.find_by_id(email)
        if user is None:
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        return Result.success(user)

    def get_contacts(self, email: str) -> Result[list[Contact]]:
        """Contacts owned by ``email``; an unknown owner is NotFound rather than an empty list."""
        user = self.users.find_by_id(email)
        if user is None:
            return Result.failure(NotFoundError("Error! This user doesn't exist in our DB"))
        return Result.success(self.contacts.list_for_owner(user.email))


def build_user_service(settings: Settings | None = None) -> UserService:
    """Wire the service against the SQL gateways, SMTP and Argon2."""
    settings = settings or get_settings()
    return UserService(
        users=SQLUserRepository(),
        activation_tokens=SQLActivationTokenRepository(),
        recovery_tokens=SQLRecoveryTokenRepository(),
        contacts=SQLContactRepository(),
        mailer=SmtpMailer(settings),
        hasher=Argon2PasswordHasher(),
        settings=settings,
    )
