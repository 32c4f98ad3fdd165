from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _PasswordMaterial(BaseModel):
    # Unknown keys (including any `id`) are ignored, so payloads never touch identifiers.
    model_config = ConfigDict(populate_by_name=True)

    password: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, alias="passwordHash")

    @model_validator(mode="after")
    def ensure_single_password_source(self):
        if self.password is not None and self.password_hash is not None:
            raise ValueError("Provide either password or passwordHash, not both.")
        return self


class UserCreate(_PasswordMaterial):
    username: str = ""
    email: str = ""


class UserUpdate(_PasswordMaterial):
    username: str
    email: str

    @model_validator(mode="after")
    def ensure_password_present(self) -> "UserUpdate":
        if self.password is None and self.password_hash is None:
            raise ValueError("A full update requires password or passwordHash.")
        return self


class UserPatch(_PasswordMaterial):
    username: Optional[str] = None
    email: Optional[str] = None


class UserPublic(BaseModel):
    id: str
    username: str
    email: str


class ErrorResponse(BaseModel):
    message: str
    developer_message: str
    code: str
