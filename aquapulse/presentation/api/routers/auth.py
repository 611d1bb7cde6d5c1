"""API router for account authentication and session management."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status

from ....application.services.auth_service import AuthService, RegistrationInput
from ....application.services.request_authenticator import (
    AuthenticatedRequest,
    extract_tokens,
)
from ....core.config import Settings
from ....core.dependencies import get_auth_service, get_settings
from ....domain.errors import NotFoundError, UnauthorizedError
from ....domain.models import CUSTOMER_ROLE, SUPPLIER_ROLE
from ..cookies import clear_auth_cookies, set_access_cookie, set_refresh_cookie
from ..dependencies import require_principal
from ..schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterSupplierRequest,
    RegisterUserRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
    VerifyResetCodeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

_INVALID_LOGIN = "Invalid email or password"


@router.post("/register-user", status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: RegisterUserRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new customer account."""
    return await auth_service.register(
        RegistrationInput(
            email=payload.email,
            password=payload.password,
            role=CUSTOMER_ROLE,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_number=payload.phone_number,
        )
    )


@router.post("/register-supplier", status_code=status.HTTP_201_CREATED)
async def register_supplier(
    payload: RegisterSupplierRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new supplier account."""
    return await auth_service.register(
        RegistrationInput(
            email=payload.email,
            password=payload.password,
            role=SUPPLIER_ROLE,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_number=payload.phone_number,
            company=payload.company,
            service_areas=payload.service_areas,
            pricing=payload.pricing,
        )
    )


@router.post("/verify-email")
async def verify_email(
    payload: VerifyEmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await auth_service.verify_email(payload.email, payload.token)


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Log in a customer, admin or supplier.

    Customers receive both tokens in the body. Everyone else receives them as
    http-only cookies and only the profile in the body.
    """
    try:
        principal = await auth_service.validate_credentials(payload.email, payload.password)
    except NotFoundError:
        logger.info("Login rejected: no account for the submitted email")
        raise UnauthorizedError(_INVALID_LOGIN) from None
    if principal is None:
        logger.info("Login rejected: wrong password")
        raise UnauthorizedError(_INVALID_LOGIN)

    result = await auth_service.login(principal)
    user = result.user_payload()

    if principal.role != CUSTOMER_ROLE:
        set_access_cookie(response, result.access_token, settings)
        set_refresh_cookie(response, result.refresh_token, settings)
        return {"user": user}

    return {
        "user": user,
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
    }


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    auth: AuthenticatedRequest = Depends(require_principal),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await auth_service.change_password(
        auth.principal, payload.old_password, payload.new_password
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    access_token, refresh_token = extract_tokens(request.headers, request.cookies)
    result = await auth_service.logout(access_token, refresh_token)
    clear_auth_cookies(response, settings)
    return result


@router.get("/me")
async def me(auth: AuthenticatedRequest = Depends(require_principal)) -> Dict[str, Any]:
    """Profile of the authenticated principal. A refreshed access token arrives as a cookie."""
    return auth.principal.to_public_dict()


@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await auth_service.forgot_password(payload.email)


@router.post("/verify-reset-code")
async def verify_reset_code(
    payload: VerifyResetCodeRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await auth_service.verify_reset_code(payload.email, payload.code)


@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await auth_service.reset_password(payload.email, payload.code, payload.new_password)
