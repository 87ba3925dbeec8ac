"""
Pydantic models for the book inventory API.

Field names are snake_case in Python and camelCase on the wire
(``gradeLevel``, ``createdAt``, ``bookId``), matching what the client sends.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# The five metadata keys, in wire form
BOOK_FIELDS: tuple[str, ...] = ("title", "author", "gradeLevel", "subject", "series")


class BookMetadata(BaseModel):
    """
    Bibliographic metadata read from a cover, or edited by a user.

    Every field is a string; unknown values are empty strings.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", description="Main title of the book")
    author: str = Field(default="", description="Author name(s)")
    grade_level: str = Field(
        default="",
        alias="gradeLevel",
        description="Grade level or age range, if printed on the cover",
        examples=["Grades 3-5", "Ages 8-12"],
    )
    subject: str = Field(
        default="",
        description="Subject or genre",
        examples=["Fantasy", "History"],
    )
    series: str = Field(default="", description="Series name, if any")


class BookCreateRequest(BaseModel):
    """
    Candidate record submitted for saving.

    Title and author are checked by the inventory service rather than here,
    so a missing value produces the service's own error message. Unknown
    keys are accepted and stored alongside the record.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str | None = None
    author: str | None = None
    grade_level: str | None = Field(default=None, alias="gradeLevel")
    subject: str | None = None
    series: str | None = None


class BookCreatedResponse(BaseModel):
    """Response model for a successful create."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Status message")
    book_id: str = Field(..., alias="bookId", description="Generated record ID")


class BookRecord(BookMetadata):
    """A persisted book, as returned by the list endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., description="Unique record ID (UUID)")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class ErrorResponse(BaseModel):
    """JSON body returned for every handled error."""

    error: str = Field(..., description="Short error message")
    details: str | None = Field(
        default=None,
        description="Underlying error message, for upstream failures",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    message: str = Field(default="")
    version: str = Field(default="1.0.0")
