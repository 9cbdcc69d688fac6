from __future__ import annotations

from ..models import AuthUser, LoginCredentials, LoginResponse, MessageResponse, RegisterData
from .base import BaseClient


class AuthClient(BaseClient):
    # A 401 from these endpoints means bad credentials, not a dead session,
    # so they bypass the client's on_unauthorized hook.

    def login(self, email: str, password: str, remember: bool = False) -> LoginResponse:
        credentials = LoginCredentials(email=email, password=password, remember=remember)
        data = self.http.request(
            "POST",
            "/api/login",
            json_body=credentials.model_dump(),
            suppress_unauthorized=True,
        )
        return LoginResponse.model_validate(data)

    def register(self, name: str, email: str, password: str, password_confirmation: str) -> LoginResponse:
        payload = RegisterData(
            name=name,
            email=email,
            password=password,
            password_confirmation=password_confirmation,
        )
        data = self.http.request(
            "POST",
            "/api/register",
            json_body=payload.model_dump(),
            suppress_unauthorized=True,
        )
        return LoginResponse.model_validate(data)

    def logout(self) -> None:
        self._request("POST", "/api/logout")

    def forgot_password(self, email: str) -> MessageResponse:
        data = self.http.request(
            "POST",
            "/api/forgot-password",
            json_body={"email": email},
            suppress_unauthorized=True,
        )
        return MessageResponse.model_validate(data or {})

    def reset_password(self, token: str, password: str, password_confirmation: str) -> MessageResponse:
        payload = {
            "token": token,
            "password": password,
            "password_confirmation": password_confirmation,
        }
        data = self.http.request("POST", "/api/reset-password", json_body=payload, suppress_unauthorized=True)
        return MessageResponse.model_validate(data or {})

    def get_user(self) -> AuthUser:
        data = self._request("GET", "/api/user")
        return AuthUser.model_validate(data)
