from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookworm.adapters.base import ImageStore
from bookworm.adapters.cloudinary_store import CloudinaryImageStore
from bookworm.config import settings
from bookworm.database import get_db
from bookworm.exceptions import AuthError
from bookworm.models.user import User
from bookworm.utils.security import decode_access_token

# auto_error=False：缺少 Token 时由下方统一返回业务错误
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """JWT 鉴权依赖：解析 Token → 查询用户 → 返回 User 实例"""
    if credentials is None or not credentials.credentials:
        raise AuthError("No authentication token, access denied", status_code=401)

    user_id = decode_access_token(credentials.credentials)

    from bookworm.services.auth_service import get_user_by_id

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise AuthError("User not found", status_code=401)

    return user


# 进程内唯一的图床客户端，由 settings 构造
_image_store: ImageStore = CloudinaryImageStore.from_settings(settings)


def get_image_store() -> ImageStore:
    """图床依赖（测试中通过 dependency_overrides 替换）"""
    return _image_store
