from datetime import datetime, timedelta

from jose import jwt, JWTError
from passlib.context import CryptContext

from bookworm.config import settings
from bookworm.exceptions import AuthError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_TOKEN = "Invalid or expired token"


def hash_password(password: str) -> str:
    """对密码进行 bcrypt 哈希"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """生成 JWT Access Token，默认 15 天过期"""
    now = datetime.utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """解析 JWT Token，返回 user_id；签名错误、过期或缺少 sub 时抛 AuthError"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthError(INVALID_TOKEN, status_code=401)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError(INVALID_TOKEN, status_code=401)
    return user_id
