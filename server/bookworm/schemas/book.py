from datetime import datetime

from pydantic import BaseModel, Field, StrictInt
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class CreateBookRequest(BaseModel):
    title: str | None = Field(None, max_length=200)
    caption: str | None = None
    # 严格整数：拒绝 true / 4.5 / "4" 之类的隐式转换
    rating: StrictInt | None = None
    image: str | None = Field(None, description="data URI（base64）或远程图片 URL")


class BookOwnerResponse(BaseModel):
    """列表中展示的发布者信息（不含邮箱、密码）"""

    username: str
    profile_image: str

    model_config = CAMEL_CONFIG


class BookResponse(BaseModel):
    id: int
    title: str
    caption: str
    rating: int
    image: str
    user: str = Field(description="发布者 ID")
    created_at: datetime

    model_config = CAMEL_CONFIG


class BookWithOwnerResponse(BookResponse):
    user: BookOwnerResponse


class BookListResponse(BaseModel):
    books: list[BookWithOwnerResponse]
    current_page: int
    total_books: int
    total_pages: int

    model_config = CAMEL_CONFIG


class MessageResponse(BaseModel):
    message: str
