"""
Strict Base Models for Request/Response Validation

Base classes with strict validation settings for the API contract between
the study backend and its clients.

Usage:
    # For request bodies (strictest validation)
    class ReviewSubmitRequest(StrictRequest):
        is_correct: bool

    # For response bodies (allows extra fields from DB)
    class ProgressResponse(StrictResponse):
        id: int
        interval_days: int

Architecture:
    Request → StrictRequest (extra="forbid") → Service
    DB Model → StrictResponse (extra="ignore") → Response
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for request bodies with strict validation.

    Rejects any fields not explicitly declared in the model, catching
    client typos and mismatches at request time rather than runtime.

    Features:
        - extra="forbid": Unknown fields raise a validation error
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
        - from_attributes=True: Allows ORM model conversion
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        validate_default=True,  # Validate defaults
        str_strip_whitespace=True,  # Clean string inputs
        from_attributes=True,  # Enable ORM conversion
    )


class StrictResponse(BaseModel):
    """
    Base model for response bodies.

    More lenient than StrictRequest: still enforces types but ignores
    extra attributes, since ORM rows carry more columns than responses.

    Example:
        >>> VocabularyResponse.model_validate(db_vocabulary)
    """

    model_config = ConfigDict(
        extra="ignore",  # Allow extra fields in responses
        validate_default=True,  # Validate defaults
        from_attributes=True,  # Enable ORM conversion
    )


class ErrorDetail(StrictResponse):
    """
    Standardized error body.

    Matches ServiceError.to_dict() so clients can rely on one structure.
    """

    error: str  # Error code (e.g., "validation_error")
    message: str  # Human-readable message
    details: Optional[dict] = None  # Additional context


class PaginatedResponse(StrictResponse):
    """
    Base model for paginated list responses.

    Subclass and add an 'items' field with the appropriate type:

        class VocabularyListResponse(PaginatedResponse):
            items: list[VocabularyResponse]
    """

    total: int
    limit: int
    offset: int = 0
    has_more: bool = False
