"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from library_api.config import APIConfig
from library_api.database import BookStore
from library_api.main import create_app
from library_api.models import Book


class InMemoryBookStore:
    """Book store double keeping documents in a dict."""

    is_valid_id = staticmethod(BookStore.is_valid_id)

    def __init__(self):
        self.documents: Dict[str, dict] = {}

    async def list_books(self) -> List[Book]:
        return [Book.from_document(doc) for doc in self.documents.values()]

    async def create_book(self, title: str) -> Book:
        book_id = ObjectId()
        self.documents[str(book_id)] = {"_id": book_id, "title": title, "comments": []}
        return Book(id=str(book_id), title=title)

    async def delete_all_books(self) -> int:
        deleted = len(self.documents)
        self.documents.clear()
        return deleted

    async def get_book(self, book_id: str) -> Optional[Book]:
        doc = self.documents.get(book_id)
        return Book.from_document(doc) if doc else None

    async def add_comment(self, book_id: str, comment: str) -> Optional[Book]:
        doc = self.documents.get(book_id)
        if not doc:
            return None
        doc["comments"].append(comment)
        return Book.from_document(doc)

    async def delete_book(self, book_id: str) -> bool:
        return self.documents.pop(book_id, None) is not None

    async def health_check(self) -> Dict:
        return {"status": "healthy", "books_count": len(self.documents)}


@pytest.fixture
def settings():
    """Settings with the status-differentiated client error contract."""
    return APIConfig(mongodb_url="mongodb://test:27017", log_format="console")


@pytest.fixture
def book_store():
    return InMemoryBookStore()


@pytest.fixture
def client(settings, book_store):
    """Create test client backed by the in-memory store."""
    with TestClient(create_app(settings=settings, book_store=book_store)) as test_client:
        yield test_client


@pytest.fixture
def failing_book_store():
    """Store whose every storage call raises a driver error."""
    from pymongo.errors import ServerSelectionTimeoutError

    store = AsyncMock(spec=BookStore)
    store.is_valid_id.side_effect = BookStore.is_valid_id
    error = ServerSelectionTimeoutError("connection refused")
    store.list_books.side_effect = error
    store.create_book.side_effect = error
    store.delete_all_books.side_effect = error
    store.get_book.side_effect = error
    store.add_comment.side_effect = error
    store.delete_book.side_effect = error
    store.health_check.return_value = {"status": "unhealthy", "error": str(error)}
    return store


@pytest.fixture
def failing_client(settings, failing_book_store):
    with TestClient(create_app(settings=settings, book_store=failing_book_store)) as test_client:
        yield test_client


@pytest.fixture
def mock_database():
    """Motor database mock whose collection methods are AsyncMocks."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)

    database = MagicMock()
    database.__getitem__.return_value = collection
    database.command = AsyncMock(return_value={"ok": 1})
    return database


@pytest.fixture
def sample_book_document():
    """Raw MongoDB document for a book with two comments."""
    return {
        "_id": ObjectId("5f8d0d55b54764421b7156c3"),
        "title": "A Light in the Attic",
        "comments": ["first", "second"],
    }
