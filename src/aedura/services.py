"""Service layer for account signup and login."""

import logging
from dataclasses import dataclass
from typing import Any

from prometheus_client import Counter
from pydantic import ValidationError

from .directory import UserDirectory
from .errors import DuplicateEmail, InvalidCredentials, InvalidPayload
from .models.user import ROLE_CONTRIBUTOR
from .passwords import CredentialHasher
from .schemas import LoginRequest, SignupRequest, first_error_message, profile_record
from .tokens import SessionClaims, TokenService


logger = logging.getLogger(__name__)

# Prometheus counters for key auth events
SIGNUP_COUNTER = Counter(
    "signups_total", "Total accounts created", ["role_type"]
)
SIGNUP_FAILURE_COUNTER = Counter(
    "signup_failures_total", "Total rejected signups", ["reason"]
)
LOGIN_COUNTER = Counter(
    "logins_total", "Total login attempts", ["outcome"]
)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful signup or login."""

    user: SessionClaims
    token: str
    remember: bool


def signup(
    directory: UserDirectory,
    hasher: CredentialHasher,
    tokens: TokenService,
    payload: Any,
    *,
    free_text_min_length: int = 1,
) -> AuthResult:
    """Validate a signup payload, create the account and mint a session token.

    Raises
    ------
    InvalidPayload
        The payload is not an object or a field is missing or out of range.
    DuplicateEmail
        An account already holds the normalized email.
    ConfigurationError
        No signing secret is configured. Checked before anything is written.
    """
    if not isinstance(payload, dict):
        SIGNUP_FAILURE_COUNTER.labels(reason="invalid_payload").inc()
        raise InvalidPayload("Invalid JSON body")
    try:
        request = SignupRequest.model_validate(
            payload, context={"free_text_min_length": free_text_min_length}
        )
    except ValidationError as exc:
        SIGNUP_FAILURE_COUNTER.labels(reason="invalid_payload").inc()
        raise InvalidPayload(first_error_message(exc)) from exc

    tokens.check_configured()
    account = request.to_account()

    if directory.find_by_email(account.email) is not None:
        SIGNUP_FAILURE_COUNTER.labels(reason="duplicate_email").inc()
        raise DuplicateEmail()

    password_hash = hasher.hash(account.password)
    record = profile_record(account.profile)
    try:
        user = directory.create(
            name=account.name,
            email=account.email,
            password_hash=password_hash,
            role_type=account.role_type,
            contributor_profile=record if account.role_type == ROLE_CONTRIBUTOR else None,
            advisory_profile=None if account.role_type == ROLE_CONTRIBUTOR else record,
        )
    except DuplicateEmail:
        # lost the race against a concurrent signup for the same email
        SIGNUP_FAILURE_COUNTER.labels(reason="duplicate_email").inc()
        raise

    SIGNUP_COUNTER.labels(role_type=user.role_type).inc()
    logger.info("created user id=%s role_type=%s", user.id, user.role_type)

    claims = SessionClaims.from_user(user)
    return AuthResult(user=claims, token=tokens.sign(claims), remember=account.remember)


def login(
    directory: UserDirectory,
    hasher: CredentialHasher,
    tokens: TokenService,
    payload: Any,
) -> AuthResult:
    """Authenticate an email/password pair and mint a session token.

    An unknown email and a wrong password raise the same
    ``InvalidCredentials`` error.
    """
    if not isinstance(payload, dict):
        raise InvalidPayload("Email and password are required")
    try:
        request = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayload(first_error_message(exc)) from exc

    tokens.check_configured()
    user = directory.find_by_email(request.email)
    if user is None:
        hasher.verify_decoy(request.password)
        LOGIN_COUNTER.labels(outcome="failure").inc()
        raise InvalidCredentials()
    if not hasher.verify(request.password, user.password_hash):
        LOGIN_COUNTER.labels(outcome="failure").inc()
        logger.info("password mismatch for user id=%s", user.id)
        raise InvalidCredentials()

    LOGIN_COUNTER.labels(outcome="success").inc()
    logger.info("user id=%s logged in", user.id)
    claims = SessionClaims.from_user(user)
    return AuthResult(user=claims, token=tokens.sign(claims), remember=request.remember)
