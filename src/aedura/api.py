"""FastAPI application exposing signup, login and session endpoints."""

import logging
from typing import Any

from fastapi import Body, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_client import Counter

from . import services
from .auth import (
    clear_session_cookie,
    get_current_session,
    get_directory,
    get_hasher,
    get_settings,
    get_token_service,
    require_session,
    set_session_cookie,
)
from .config import Settings, settings
from .database import init_db
from .directory import UserDirectory
from .errors import AuthError
from .models.user import ROLE_ADVISORY
from .passwords import CredentialHasher
from .schemas import AuthResponse, DashboardResponse, MessageResponse, SessionResponse
from .tokens import SessionClaims, TokenService


app = FastAPI(title=settings.api_title)
init_db()

logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics.

    Only the path is logged: the legacy GET login carries credentials in
    the query string.
    """
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response
    except Exception:
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status="500",
        ).inc()
        # logged once by handle_unexpected_error
        raise


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}, headers=headers
    )


@app.exception_handler(AuthError)
async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message
        )
    else:
        logger.info("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    return _error(exc.status_code, exc.client_message, exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return _error(400, "Invalid JSON body")
    return _error(400, "Invalid request payload")


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


def _deliver(response: Response, result: services.AuthResult, config: Settings) -> AuthResponse:
    set_session_cookie(
        response,
        result.token,
        remember=result.remember,
        secure=config.secure_cookies,
        max_age=config.token_ttl_hours * 60 * 60,
    )
    return AuthResponse(user=result.user, token=result.token)


@app.post("/api/signup", response_model=AuthResponse, status_code=201)
def signup(
    response: Response,
    payload: Any = Body(None),
    directory: UserDirectory = Depends(get_directory),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    config: Settings = Depends(get_settings),
):
    """Create a contributor or advisory-board account and start a session."""
    result = services.signup(
        directory,
        hasher,
        tokens,
        payload,
        free_text_min_length=config.free_text_min_length,
    )
    return _deliver(response, result, config)


@app.post("/api/login", response_model=AuthResponse)
def login(
    response: Response,
    payload: Any = Body(None),
    directory: UserDirectory = Depends(get_directory),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    config: Settings = Depends(get_settings),
):
    """Authenticate with email and password; ``remember`` persists the cookie."""
    result = services.login(directory, hasher, tokens, payload)
    return _deliver(response, result, config)


@app.get("/api/login", response_model=AuthResponse)
def login_with_query(
    response: Response,
    email: str = Query(""),
    password: str = Query(""),
    remember: bool = Query(False),
    directory: UserDirectory = Depends(get_directory),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    config: Settings = Depends(get_settings),
):
    """Legacy login with credentials in the query string.

    Disabled unless ``ALLOW_QUERY_LOGIN`` is set: query strings end up in
    proxy and server logs.
    """
    if not config.allow_query_login:
        return _error(405, "Use POST /api/login")
    result = services.login(
        directory, hasher, tokens, {"email": email, "password": password, "remember": remember}
    )
    return _deliver(response, result, config)


@app.post("/api/logout", response_model=MessageResponse)
def logout(response: Response, config: Settings = Depends(get_settings)):
    """Drop the session cookie. Tokens already handed out stay valid until expiry."""
    clear_session_cookie(response, secure=config.secure_cookies)
    return MessageResponse(message="Logged out")


@app.get("/api/me", response_model=SessionResponse)
def me(claims: SessionClaims = Depends(require_session)):
    """Return the identity carried by the caller's session token."""
    return SessionResponse(user=claims)


@app.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    claims: SessionClaims | None = Depends(get_current_session),
    directory: UserDirectory = Depends(get_directory),
):
    """Return the personalized dashboard, or send anonymous callers to /login."""
    user = directory.find_by_email(claims.email) if claims is not None else None
    if user is None:
        return RedirectResponse("/login", status_code=303)
    role_label = (
        "member of the Advisory Board" if claims.role_type == ROLE_ADVISORY else "Contributor"
    )
    return DashboardResponse(
        greeting=f"Welcome back, {claims.name}!",
        role_label=role_label,
        user=claims,
        profile=user.profile,
    )
