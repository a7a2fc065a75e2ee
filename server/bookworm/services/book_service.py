"""书评业务逻辑 - 创建、分页列表、我的书评、删除（含图床清理）"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookworm.adapters.base import ImageStore, ImageStoreError
from bookworm.exceptions import ForbiddenError, NotFoundError, UpstreamError, ValidationError
from bookworm.models.book import Book

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

# 新的在前，时间相同时按插入顺序
NEWEST_FIRST = (Book.created_at.desc(), Book.id.desc())


async def create_book(
    db: AsyncSession,
    image_store: ImageStore,
    user_id: str,
    title: str | None,
    caption: str | None,
    rating: int | None,
    image: str | None,
) -> Book:
    """先上传图片，成功后再落库；上传失败不会留下任何记录"""
    if not title or not caption or rating is None or not image:
        raise ValidationError("Please fill all fields")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

    try:
        image_url = await image_store.upload(image)
    except ImageStoreError as e:
        logger.error(f"Image upload to {image_store.name} failed for user {user_id}: {e}")
        raise UpstreamError("Image upload failed")

    book = Book(
        title=title,
        caption=caption,
        rating=rating,
        image=image_url,
        user_id=user_id,
    )
    db.add(book)
    await db.flush()
    await db.refresh(book)
    return book


async def get_books_paginated(
    db: AsyncSession,
    page: int = 1,
    limit: int = 5,
) -> tuple[list[Book], int]:
    """全站书评列表（分页，预加载发布者）"""
    count_result = await db.execute(select(func.count()).select_from(Book))
    total = count_result.scalar() or 0

    result = await db.execute(
        select(Book)
        .options(selectinload(Book.user))
        .order_by(*NEWEST_FIRST)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    books = list(result.scalars().all())

    return books, total


async def get_user_books(db: AsyncSession, user_id: str) -> list[Book]:
    """获取用户自己发布的全部书评"""
    result = await db.execute(
        select(Book)
        .where(Book.user_id == user_id)
        .order_by(*NEWEST_FIRST)
    )
    return list(result.scalars().all())


async def get_book_by_id(db: AsyncSession, book_id: int) -> Book | None:
    result = await db.execute(select(Book).where(Book.id == book_id))
    return result.scalar_one_or_none()


async def delete_book(
    db: AsyncSession,
    image_store: ImageStore,
    book_id: int,
    user_id: str,
) -> None:
    """
    删除书评。
    1. 书评不存在 → 404
    2. 非发布者 → 403
    3. 图片托管在图床上时先删图；删图失败则保留记录，整体报错
    4. 删除记录
    """
    book = await get_book_by_id(db, book_id)
    if not book:
        raise NotFoundError("Book not found")

    if str(book.user_id) != str(user_id):
        raise ForbiddenError("You are not authorized to delete this book")

    if book.image and image_store.owns(book.image):
        try:
            await image_store.delete(book.image)
        except ImageStoreError as e:
            logger.error(f"Image deletion from {image_store.name} failed for book {book.id}: {e}")
            raise UpstreamError("Error deleting image from image store")

    await db.delete(book)
    await db.flush()
