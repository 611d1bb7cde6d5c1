"""Pydantic schemas for the authentication endpoints.

Field names are snake_case; the camelCase spelling used by the web client
(``firstName``, ``newPassword``...) is accepted as an alias.

Emails are plain strings on every body; the service normalises them and
applies one format rule at registration, so any address that can register
can also log in and reset.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterUserRequest(_Payload):
    """Customer self-registration."""

    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None


class RegisterSupplierRequest(RegisterUserRequest):
    """Supplier self-registration; ``company`` is validated by the service."""

    company: Optional[str] = None
    service_areas: List[Dict[str, Any]] = []
    pricing: List[Dict[str, Any]] = []


class LoginRequest(_Payload):
    email: str
    password: str


class VerifyEmailRequest(_Payload):
    email: str
    token: str


class ChangePasswordRequest(_Payload):
    old_password: str
    new_password: str


class ForgotPasswordRequest(_Payload):
    email: str


class VerifyResetCodeRequest(_Payload):
    email: str
    code: str


class ResetPasswordRequest(_Payload):
    email: str
    code: str
    new_password: str
