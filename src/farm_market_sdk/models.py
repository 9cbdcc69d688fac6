from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MalformedRecord


class TokenRecord(BaseModel):
    """Structured token entry persisted next to the legacy bare token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(min_length=1)
    expires_at_ms: Optional[int] = Field(default=None, alias="expires")

    @classmethod
    def parse(cls, raw: str) -> "TokenRecord":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedRecord(f"token record is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedRecord(f"token record must be an object, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedRecord(f"token record failed validation: {exc.error_count()} error(s)") from exc

    def dumps(self) -> str:
        return self.model_dump_json(by_alias=True)

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at_ms is not None and now_ms > self.expires_at_ms


class AuthUser(BaseModel):
    id: int
    name: str
    email: str
    profile_picture: str | None = Field(default=None, alias="profilePicture")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LoginCredentials(BaseModel):
    email: str
    password: str
    remember: bool = False


class RegisterData(BaseModel):
    name: str
    email: str
    password: str
    password_confirmation: str


class LoginResponse(BaseModel):
    token: str
    user: AuthUser | None = None

    model_config = ConfigDict(extra="ignore")


class MessageResponse(BaseModel):
    message: str = ""

    model_config = ConfigDict(extra="ignore")
