from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_PASSWORD_BYTES = 72


# ---- 请求 ----

class RegisterRequest(BaseModel):
    # 字段均可缺省，缺失由 auth_service 统一报 "Please fill all fields"
    username: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    password: str | None = None
    profile_image: str | None = Field(None, max_length=500, description="头像URL，缺省时按用户名生成")

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None

    @field_validator("password")
    @classmethod
    def limit_password_bytes(cls, value: str | None) -> str | None:
        # bcrypt 只取前 72 字节，更长的密码会被静默截断
        if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None


# ---- 响应 ----

class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    profile_image: str
    created_at: datetime

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class AuthResponse(BaseModel):
    token: str
    user: UserResponse
