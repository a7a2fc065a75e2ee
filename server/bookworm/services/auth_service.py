import logging
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookworm.config import settings
from bookworm.exceptions import AuthError, ConflictError, ValidationError
from bookworm.models.user import User
from bookworm.utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3

# 邮箱不存在与密码错误返回同一条消息，避免泄露账号是否存在
INVALID_CREDENTIALS = "Invalid credentials"


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """根据邮箱查找用户"""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """根据用户名查找用户"""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """根据 ID 查找用户"""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


def default_avatar_url(username: str) -> str:
    """按用户名生成默认头像，同一用户名总是得到同一 URL"""
    return f"{settings.AVATAR_BASE_URL}?seed={quote(username)}"


async def register_user(
    db: AsyncSession,
    username: str | None,
    email: str | None,
    password: str | None,
    profile_image: str | None = None,
) -> User:
    """
    注册新用户，返回 User 实例。
    校验顺序：字段齐全 → 密码长度 → 用户名长度 → 邮箱重复 → 用户名重复。
    """
    if not username or not email or not password:
        raise ValidationError("Please fill all fields")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")

    if await get_user_by_email(db, email):
        raise ConflictError("Email already exists")
    if await get_user_by_username(db, username):
        raise ConflictError("Username already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        profile_image=profile_image or default_avatar_url(username),
    )
    db.add(user)
    await db.flush()  # 获取 id 等默认值，但不 commit（由 get_db 统一提交）
    await db.refresh(user)

    logger.info(f"Registered user {user.id} ({username})")
    return user


async def authenticate_user(db: AsyncSession, email: str | None, password: str | None) -> User:
    """验证邮箱+密码，返回 User。失败抛 AuthError。"""
    if not email or not password:
        raise ValidationError("Please fill all fields")

    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthError(INVALID_CREDENTIALS)
    return user


def build_token(user_id: str) -> str:
    """签发会话 Token"""
    return create_access_token(user_id)
