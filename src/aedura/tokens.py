"""Signed session tokens (JWT) carrying the caller's identity snapshot."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError
from .models.user import ROLE_TYPES

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


class SessionClaims(BaseModel):
    """Identity snapshot embedded in a session token. Never holds the hash."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    email: str
    role_type: str = Field(alias="roleType")

    @classmethod
    def from_user(cls, user) -> "SessionClaims":
        return cls(id=user.id, name=user.name, email=user.email, role_type=user.role_type)


class TokenService:
    """Mint and verify HMAC-signed JWTs with a server-held secret."""

    def __init__(self, secret: str | None, algorithm: str = "HS256", default_ttl: timedelta = DEFAULT_TTL) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.default_ttl = default_ttl

    def check_configured(self) -> None:
        """Raise ``ConfigurationError`` unless a signing secret is set."""
        self._require_secret()

    def _require_secret(self) -> str:
        if not self._secret:
            raise ConfigurationError("JWT_SECRET is not configured")
        return self._secret

    def sign(self, claims: SessionClaims, ttl: timedelta | None = None) -> str:
        secret = self._require_secret()
        issued = datetime.now(timezone.utc)
        expires = issued + (self.default_ttl if ttl is None else ttl)
        payload = claims.model_dump(by_alias=True)
        payload["iat"] = int(issued.timestamp())
        payload["exp"] = int(expires.timestamp())
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str | None) -> Optional[SessionClaims]:
        """Return the claims of a valid, unexpired token, otherwise ``None``."""
        if not token:
            return None
        secret = self._require_secret()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
            claims = SessionClaims.model_validate(payload)
        except (jwt.PyJWTError, ValidationError):
            logger.debug("rejected session token", exc_info=True)
            return None
        if claims.role_type not in ROLE_TYPES:
            return None
        return claims
