"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Plain-text client messages
MISSING_TITLE = "missing required field title"
MISSING_COMMENT = "missing required field comment"
NO_BOOK_EXISTS = "no book exists"
DELETE_SUCCESSFUL = "delete successful"
COMPLETE_DELETE_SUCCESSFUL = "complete delete successful"


class Book(BaseModel):
    """
    A stored book with its ordered comments.

    The comment count is always derived from the comment list and is never
    stored alongside it.
    """
    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    comments: List[str] = Field(default_factory=list, description="Comments in insertion order")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        """Ensure the title is not empty."""
        if not v:
            raise ValueError("title must not be empty")
        return v

    @property
    def commentcount(self) -> int:
        return len(self.comments)

    @classmethod
    def from_document(cls, document: dict) -> "Book":
        """Build a book from a raw MongoDB document."""
        return cls(
            id=str(document["_id"]),
            title=document["title"],
            comments=list(document.get("comments") or []),
        )


class BookSummary(BaseModel):
    """Book entry in the collection listing."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")
    commentcount: int = Field(..., ge=0, description="Number of comments")

    @classmethod
    def from_book(cls, book: Book) -> "BookSummary":
        return cls(id=book.id, title=book.title, commentcount=book.commentcount)


class BookCreated(BaseModel):
    """Response model for a newly created book."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")

    @classmethod
    def from_book(cls, book: Book) -> "BookCreated":
        return cls(id=book.id, title=book.title)


class BookDetail(BaseModel):
    """Response model for a single book with all of its comments."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")
    comments: List[str] = Field(..., description="Comments in insertion order")

    @classmethod
    def from_book(cls, book: Book) -> "BookDetail":
        return cls(id=book.id, title=book.title, comments=book.comments)


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
