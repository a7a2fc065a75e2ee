from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookworm.database import get_db
from bookworm.models.user import User
from bookworm.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    UserResponse,
)
from bookworm.services.auth_service import (
    register_user,
    authenticate_user,
    build_token,
)
from bookworm.utils.deps import get_current_user

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/register", response_model=AuthResponse, status_code=201, summary="用户注册")
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """用户名 + 邮箱 + 密码注册，返回用户信息和 JWT Token"""
    user = await register_user(
        db, body.username, body.email, body.password, body.profile_image
    )
    return AuthResponse(
        token=build_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse, summary="用户登录")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """邮箱 + 密码登录，返回用户信息和新的 JWT Token"""
    user = await authenticate_user(db, body.email, body.password)
    return AuthResponse(
        token=build_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse, summary="获取当前用户")
async def get_me(current_user: User = Depends(get_current_user)):
    """根据 Token 返回当前登录用户信息"""
    return UserResponse.model_validate(current_user)
