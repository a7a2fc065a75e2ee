import math

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookworm.adapters.base import ImageStore
from bookworm.config import settings
from bookworm.database import get_db
from bookworm.models.book import Book
from bookworm.models.user import User
from bookworm.schemas.book import (
    CreateBookRequest,
    BookOwnerResponse,
    BookResponse,
    BookWithOwnerResponse,
    BookListResponse,
    MessageResponse,
)
from bookworm.services.book_service import (
    create_book,
    get_books_paginated,
    get_user_books,
    delete_book,
)
from bookworm.utils.deps import get_current_user, get_image_store

router = APIRouter(prefix="/books", tags=["书评"])

# SQLite INTEGER 为 64 位有符号整数，超出范围的 id / offset 会让驱动抛 OverflowError
SQLITE_MAX_INT = 2**63 - 1
MAX_PAGE = SQLITE_MAX_INT // settings.BOOKS_MAX_PAGE_SIZE


def _to_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        caption=book.caption,
        rating=book.rating,
        image=book.image,
        user=book.user_id,
        created_at=book.created_at,
    )


def _to_response_with_owner(book: Book) -> BookWithOwnerResponse:
    """列表展示：发布者只暴露用户名和头像"""
    return BookWithOwnerResponse(
        id=book.id,
        title=book.title,
        caption=book.caption,
        rating=book.rating,
        image=book.image,
        user=BookOwnerResponse(
            username=book.user.username,
            profile_image=book.user.profile_image,
        ),
        created_at=book.created_at,
    )


@router.post("", response_model=BookResponse, status_code=201, summary="发布书评")
async def create(
    body: CreateBookRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_store: ImageStore = Depends(get_image_store),
):
    """上传封面图片后创建书评"""
    book = await create_book(
        db, image_store, current_user.id,
        body.title, body.caption, body.rating, body.image,
    )
    return _to_response(book)


@router.get("", response_model=BookListResponse, summary="书评列表")
async def list_books(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(settings.BOOKS_DEFAULT_PAGE_SIZE, ge=1, le=settings.BOOKS_MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """全站书评（分页，新的在前）"""
    books, total = await get_books_paginated(db, page, limit)
    return BookListResponse(
        books=[_to_response_with_owner(b) for b in books],
        current_page=page,
        total_books=total,
        total_pages=math.ceil(total / limit),
    )


@router.get("/user", response_model=list[BookResponse], summary="我的书评")
async def list_my_books(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """当前用户发布的全部书评（不分页）"""
    books = await get_user_books(db, current_user.id)
    return [_to_response(b) for b in books]


@router.delete("/{book_id}", response_model=MessageResponse, summary="删除书评")
async def remove(
    book_id: int = Path(..., ge=1, le=SQLITE_MAX_INT),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_store: ImageStore = Depends(get_image_store),
):
    """仅发布者可删除；先清理图床图片再删除记录"""
    await delete_book(db, image_store, book_id, current_user.id)
    return MessageResponse(message="Book deleted successfully")
