from fastapi import Response

from ...application.services.request_authenticator import ACCESS_COOKIE, REFRESH_COOKIE
from ...core.config import Settings


def set_access_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        token,
        max_age=settings.access_cookie_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=settings.refresh_cookie_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, httponly=True, samesite="lax", secure=settings.cookie_secure)
