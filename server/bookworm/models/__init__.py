from bookworm.models.user import User
from bookworm.models.book import Book

__all__ = [
    "User",
    "Book",
]
