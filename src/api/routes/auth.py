"""Authentication routes (register, login, Google OAuth, refresh, logout, sessions)."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies import (
    get_config,
    get_list_sessions_handler,
    get_login_google_handler,
    get_login_handler,
    get_logout_handler,
    get_redirect_google_handler,
    get_refresh_handler,
    get_register_handler,
)
from api.models import (
    AuthUrlResponse,
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    TokenResponse,
    UserResponse,
)
from api.security import get_current_claims, get_current_user_required
from domain.model.session import DeviceInfo, LoginResult, TokenClaims
from domain.model.user import User
from services.external_login_service import (
    LoginGoogleCommand,
    LoginGoogleHandler,
    RedirectGoogleHandler,
)
from services.login_service import LoginUserCommand, LoginUserHandler
from services.registration_service import RegisterUserCommand, RegisterUserHandler
from services.session_service import (
    ListSessionsHandler,
    LogoutCommand,
    LogoutHandler,
    RefreshTokenCommand,
    RefreshTokenHandler,
)
from utils.config import AuthConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _device(request: Request) -> DeviceInfo:
    return DeviceInfo(
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )


def _token_response(response: Response, result: LoginResult, config: AuthConfig) -> TokenResponse:
    """Set the refresh-token cookie and return the access token body."""
    response.set_cookie(
        key=config.refresh_cookie_name,
        value=result.refresh_token,
        max_age=int(config.refresh_token_ttl.total_seconds()),
        path=config.refresh_cookie_path,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )
    return TokenResponse(access_token=result.access_token)


# bcrypt is CPU-bound: register/login are sync so FastAPI runs them in its threadpool


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, handler: RegisterUserHandler = Depends(get_register_handler)):
    """Register a new user. No token is issued; call /auth/login next.

    Raises:
        409 if email already exists, 400 if validation fails
    """
    user = handler.handle(RegisterUserCommand(
        email=request.email,
        password=request.password,
        name=request.name,
    ))
    return UserResponse.from_domain(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    handler: LoginUserHandler = Depends(get_login_handler),
    config: AuthConfig = Depends(get_config),
):
    """Login user, return an access token and set the refresh-token cookie.

    Raises:
        401 if credentials are invalid
    """
    result = handler.handle(LoginUserCommand(
        email=body.email,
        password=body.password,
        device=_device(request),
    ))
    return _token_response(response, result, config)


@router.get("/google", response_model=AuthUrlResponse)
def google_redirect(handler: RedirectGoogleHandler = Depends(get_redirect_google_handler)):
    """Return the Google consent-screen URL."""
    return AuthUrlResponse(url=handler.handle())


@router.get("/google/callback", response_model=TokenResponse)
async def google_callback(
    request: Request,
    response: Response,
    code: str = "",
    state: str = "",
    handler: LoginGoogleHandler = Depends(get_login_google_handler),
    config: AuthConfig = Depends(get_config),
):
    """Complete Google login with the authorization code."""
    result = await handler.handle(LoginGoogleCommand(code=code, state=state, device=_device(request)))
    return _token_response(response, result, config)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    response: Response,
    handler: RefreshTokenHandler = Depends(get_refresh_handler),
    config: AuthConfig = Depends(get_config),
):
    """Rotate the refresh-token cookie and return a new access token."""
    result = handler.handle(RefreshTokenCommand(
        refresh_token=request.cookies.get(config.refresh_cookie_name, ""),
        device=_device(request),
    ))
    return _token_response(response, result, config)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    handler: LogoutHandler = Depends(get_logout_handler),
    config: AuthConfig = Depends(get_config),
):
    """Revoke the session behind the refresh-token cookie and clear the cookie."""
    handler.handle(LogoutCommand(refresh_token=request.cookies.get(config.refresh_cookie_name, "")))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=config.refresh_cookie_name,
        path=config.refresh_cookie_path,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )
    return response


@router.get("/sessions", response_model=list[SessionResponse])
def list_sessions(
    active_only: bool = False,
    claims: TokenClaims = Depends(get_current_claims),
    handler: ListSessionsHandler = Depends(get_list_sessions_handler),
):
    """List the caller's sessions, newest first."""
    return [SessionResponse.from_domain(s) for s in handler.handle(claims.sub, active_only=active_only)]


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user_required)):
    """Get current authenticated user info."""
    return UserResponse.from_domain(current_user)
