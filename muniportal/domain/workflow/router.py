"""Workflow router - FastAPI endpoints for application status and reviewer changes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...models import Profile
from .registry import ApplicationTypeDescriptor, get_descriptor
from .schemas import (
    ApplicationSummary,
    ReviewerAssignmentRequest,
    StatusInfo,
    StatusUpdateRequest,
    StatusVocabularyResponse,
    TransitionsResponse,
)
from .service import WorkflowService
from .statuses import (
    get_initial_status,
    get_status_description,
    get_status_display_name,
    get_status_vocabulary,
    get_valid_status_transitions,
    is_terminal_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_workflow_service(db: Session = Depends(get_db)) -> WorkflowService:
    """Dependency injection for WorkflowService"""
    return WorkflowService(db)


def to_summary(descriptor: ApplicationTypeDescriptor, record) -> ApplicationSummary:
    status = descriptor.record_status(record)
    return ApplicationSummary(
        id=descriptor.record_id(record),
        application_type=descriptor.application_type,
        status=status,
        status_display_name=get_status_display_name(status),
        customer_id=record.customer_id,
        user_id=record.user_id,
        assigned_reviewer_id=record.assigned_reviewer_id,
        version=record.version,
        base_amount_cents=record.base_amount_cents or 0,
        service_fee_cents=record.service_fee_cents or 0,
        total_amount_cents=record.total_amount_cents or 0,
        submitted_at=record.submitted_at,
        approved_at=record.approved_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


# ============================================================================
# STATUS VOCABULARY
# ============================================================================


@router.get("/{application_type}/statuses", response_model=StatusVocabularyResponse)
async def get_status_vocabulary_for_type(application_type: str):
    """Statuses, descriptions and allowed next statuses for an application type"""
    descriptor = get_descriptor(application_type)
    statuses = [
        StatusInfo(
            status=status,
            display_name=get_status_display_name(status),
            description=get_status_description(descriptor.application_type, status),
            next_statuses=get_valid_status_transitions(descriptor.application_type, status),
            is_terminal=is_terminal_status(descriptor.application_type, status),
        )
        for status in get_status_vocabulary(descriptor.application_type)
    ]
    return StatusVocabularyResponse(
        application_type=descriptor.application_type,
        initial_status=get_initial_status(descriptor.application_type),
        statuses=statuses,
    )


# ============================================================================
# APPLICATIONS
# ============================================================================


@router.get("/{application_type}", response_model=list[ApplicationSummary])
async def list_applications(
    application_type: str,
    status: Optional[str] = Query(None),
    assigned_reviewer_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    """List applications visible to the caller"""
    descriptor, records = service.list_applications(
        application_type, current_profile, status, assigned_reviewer_id, limit, offset
    )
    return [to_summary(descriptor, record) for record in records]


@router.get("/{application_type}/{application_id}", response_model=ApplicationSummary)
async def get_application(
    application_type: str,
    application_id: str,
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    descriptor, record = service.get_application(application_type, application_id, current_profile)
    return to_summary(descriptor, record)


@router.get("/{application_type}/{application_id}/transitions", response_model=TransitionsResponse)
async def get_application_transitions(
    application_type: str,
    application_id: str,
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Statuses the caller can move this application to"""
    return service.get_transitions(application_type, application_id, current_profile)


@router.patch("/{application_type}/{application_id}/status", response_model=ApplicationSummary)
async def update_application_status(
    application_type: str,
    application_id: str,
    data: StatusUpdateRequest,
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Change an application's status"""
    record = service.update_status(
        application_type,
        application_id,
        data.status,
        current_profile,
        reason=data.reason,
        expected_version=data.expected_version,
    )
    return to_summary(get_descriptor(application_type), record)


# ============================================================================
# REVIEWER ASSIGNMENT
# ============================================================================


@router.put("/{application_type}/{application_id}/reviewer", response_model=ApplicationSummary)
async def assign_reviewer(
    application_type: str,
    application_id: str,
    data: ReviewerAssignmentRequest,
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Assign a staff reviewer (idempotent)"""
    record = service.assign_reviewer(
        application_type,
        application_id,
        data.reviewer_id,
        current_profile,
        expected_version=data.expected_version,
    )
    return to_summary(get_descriptor(application_type), record)


@router.delete("/{application_type}/{application_id}/reviewer", response_model=ApplicationSummary)
async def unassign_reviewer(
    application_type: str,
    application_id: str,
    current_profile: Profile = Depends(get_current_profile),
    service: WorkflowService = Depends(get_workflow_service),
):
    record = service.unassign_reviewer(application_type, application_id, current_profile)
    return to_summary(get_descriptor(application_type), record)
