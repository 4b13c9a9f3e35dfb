"""Workflow domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class StatusUpdateRequest(BaseModel):
    """Schema for moving an application to a new status"""

    status: str
    reason: Optional[str] = None
    expected_version: Optional[int] = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v):
        return v.strip().lower()


class ReviewerAssignmentRequest(BaseModel):
    """Schema for assigning a reviewer"""

    reviewer_id: str
    expected_version: Optional[int] = None


class ApplicationSummary(BaseModel):
    """Status-centric view of any application type"""

    id: str
    application_type: str
    status: str
    status_display_name: str
    customer_id: str
    user_id: str
    assigned_reviewer_id: Optional[str] = None
    version: int
    base_amount_cents: int
    service_fee_cents: int
    total_amount_cents: int
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TransitionOption(BaseModel):
    status: str
    display_name: str
    description: str
    requires_reason: bool


class TransitionsResponse(BaseModel):
    application_id: str
    current_status: str
    version: int
    transitions: list[TransitionOption]


class StatusInfo(BaseModel):
    status: str
    display_name: str
    description: str
    next_statuses: list[str]
    is_terminal: bool


class StatusVocabularyResponse(BaseModel):
    application_type: str
    initial_status: str
    statuses: list[StatusInfo]
