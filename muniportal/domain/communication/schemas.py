"""Communication domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class CommentCreate(BaseModel):
    """Schema for posting a comment"""

    comment_text: str
    is_internal: bool = False

    @field_validator("comment_text")
    @classmethod
    def validate_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Please enter a comment.")
        return v.strip()


class CommentAuthor(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    account_type: Optional[str] = None

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    """Schema for comment response"""

    id: int
    application_id: str
    reviewer_id: str
    comment_text: str
    is_internal: bool
    created_at: Optional[datetime] = None
    reviewer: Optional[CommentAuthor] = None
