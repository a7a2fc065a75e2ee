from pydantic import Field
from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    # 项目信息
    APP_NAME: str = "Bookworm"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # 数据库
    DATABASE_DIR: Path = Path(__file__).resolve().parent.parent / "data"
    DATABASE_NAME: str = "bookworm.db"

    @property
    def DATABASE_URL(self) -> str:
        self.DATABASE_DIR.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{self.DATABASE_DIR / self.DATABASE_NAME}"

    # JWT
    JWT_SECRET_KEY: str = Field("dev-secret-key-change-in-production", min_length=1)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 15  # 15 天

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:8081", "http://localhost:19006", "http://localhost:3000"]

    # 默认头像（按用户名生成）
    AVATAR_BASE_URL: str = "https://api.dicebear.com/9.x/avataaars/svg"

    # 书评列表分页
    BOOKS_DEFAULT_PAGE_SIZE: int = 5
    BOOKS_MAX_PAGE_SIZE: int = 50

    # Cloudinary 图床
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_FOLDER: str = ""
    IMAGE_STORE_TIMEOUT_SECONDS: float = 30.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
