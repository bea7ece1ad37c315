from datetime import timedelta
from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import Settings, settings
from .database import SessionLocal
from .directory import UserDirectory
from .errors import Unauthenticated
from .passwords import CredentialHasher
from .tokens import SessionClaims, TokenService

COOKIE_NAME = "token"
ACCESS_TOKEN_HEADER = "x-access-token"

security = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


@lru_cache(maxsize=None)
def get_hasher() -> CredentialHasher:
    return CredentialHasher(
        time_cost=settings.password_time_cost,
        memory_cost=settings.password_memory_cost,
        parallelism=settings.password_parallelism,
    )


@lru_cache(maxsize=None)
def get_token_service() -> TokenService:
    return TokenService(
        settings.jwt_secret,
        settings.jwt_algorithm,
        default_ttl=timedelta(hours=settings.token_ttl_hours),
    )


def extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Find the session token: cookie, then bearer header, then X-Access-Token."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    token = request.headers.get(ACCESS_TOKEN_HEADER, "").strip()
    return token or None


def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[SessionClaims]:
    return tokens.verify(extract_token(request, credentials))


def require_session(
    claims: Optional[SessionClaims] = Depends(get_current_session),
) -> SessionClaims:
    if claims is None:
        raise Unauthenticated()
    return claims


def set_session_cookie(response: Response, token: str, *, remember: bool, secure: bool, max_age: int) -> None:
    """Attach the session cookie; without ``remember`` it lasts for the browser session."""
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=max_age if remember else None,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, *, secure: bool) -> None:
    response.delete_cookie(COOKIE_NAME, path="/", secure=secure, httponly=True, samesite="lax")
