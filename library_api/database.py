"""
Database service layer for the FastAPI application.
Handles CRUD operations on the books collection.
"""

from typing import Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from library_api.models import Book

logger = structlog.get_logger(__name__)


class BookStore:
    """Async MongoDB store for books and their comments."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "books"):
        """
        Initialize the book store.

        Args:
            database: Motor database handle
            collection_name: Name of the books collection
        """
        self.database = database
        self.collection_name = collection_name
        self.books_collection = database[collection_name]

    @staticmethod
    def _to_book(book_doc: dict) -> Optional[Book]:
        """Convert a stored document, skipping ones without a usable title."""
        try:
            return Book.from_document(book_doc)
        except (KeyError, ValidationError) as e:
            logger.warning("Skipping unreadable book document", book_id=str(book_doc.get("_id")), error=str(e))
            return None

    @staticmethod
    def is_valid_id(book_id: str) -> bool:
        """Check that book_id follows the ObjectId grammar."""
        return ObjectId.is_valid(book_id)

    async def list_books(self) -> List[Book]:
        """
        Get every stored book.

        Returns:
            List of books in storage order
        """
        try:
            cursor = self.books_collection.find({}, {"title": 1, "comments": 1})
            book_docs = await cursor.to_list(length=None)
            books = (self._to_book(doc) for doc in book_docs)
            return [book for book in books if book is not None]

        except PyMongoError as e:
            logger.error("Failed to list books", error=str(e))
            raise

    async def create_book(self, title: str) -> Book:
        """
        Insert a new book with no comments.

        Args:
            title: Book title

        Returns:
            The created book
        """
        try:
            book_doc = {"title": title, "comments": []}
            result = await self.books_collection.insert_one(book_doc)
            book = Book(id=str(result.inserted_id), title=title)
            logger.info("Book created", book_id=book.id, title=title)
            return book

        except PyMongoError as e:
            logger.error("Failed to create book", title=title, error=str(e))
            raise

    async def delete_all_books(self) -> int:
        """
        Remove every book.

        Returns:
            Number of deleted books
        """
        try:
            result = await self.books_collection.delete_many({})
            logger.info("All books deleted", deleted_count=result.deleted_count)
            return result.deleted_count

        except PyMongoError as e:
            logger.error("Failed to delete all books", error=str(e))
            raise

    async def get_book(self, book_id: str) -> Optional[Book]:
        """
        Get a single book by ID.

        Args:
            book_id: Book identifier

        Returns:
            Book if found, None otherwise
        """
        if not self.is_valid_id(book_id):
            return None

        try:
            book_doc = await self.books_collection.find_one({"_id": ObjectId(book_id)})
            if book_doc:
                return self._to_book(book_doc)
            return None

        except PyMongoError as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise

    async def add_comment(self, book_id: str, comment: str) -> Optional[Book]:
        """
        Append a comment to a book.

        The append is a single $push so concurrent comments on the same book
        are all kept.

        Args:
            book_id: Book identifier
            comment: Comment text

        Returns:
            The updated book, or None if the book does not exist
        """
        if not self.is_valid_id(book_id):
            return None

        try:
            book_doc = await self.books_collection.find_one_and_update(
                {"_id": ObjectId(book_id)},
                {"$push": {"comments": comment}},
                return_document=ReturnDocument.AFTER,
            )
            if book_doc:
                logger.debug("Comment added", book_id=book_id)
                return self._to_book(book_doc)
            return None

        except PyMongoError as e:
            logger.error("Failed to add comment", book_id=book_id, error=str(e))
            raise

    async def delete_book(self, book_id: str) -> bool:
        """
        Delete a single book by ID.

        Args:
            book_id: Book identifier

        Returns:
            True if a book was deleted
        """
        if not self.is_valid_id(book_id):
            return False

        try:
            result = await self.books_collection.delete_one({"_id": ObjectId(book_id)})
            if result.deleted_count:
                logger.info("Book deleted", book_id=book_id)
            return result.deleted_count == 1

        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.books_collection.count_documents({})

            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except PyMongoError as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
