from fastapi import Depends, Request, Response

from ...application.services.request_authenticator import (
    AuthenticatedRequest,
    RequestAuthenticator,
)
from ...core.config import Settings
from ...core.dependencies import get_request_authenticator, get_settings
from .cookies import set_access_cookie


def require_principal(
    request: Request,
    response: Response,
    authenticator: RequestAuthenticator = Depends(get_request_authenticator),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedRequest:
    auth = authenticator.authenticate(request.headers, request.cookies)
    if auth.new_token_issued and auth.new_token:
        set_access_cookie(response, auth.new_token, settings)
    return auth
