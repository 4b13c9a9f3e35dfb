"""Communication router - FastAPI endpoints for application comment threads"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...models import Profile
from ..workflow.registry import get_descriptor
from .schemas import CommentAuthor, CommentCreate, CommentResponse
from .service import CommunicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Communication"])


def get_communication_service(db: Session = Depends(get_db)) -> CommunicationService:
    """Dependency injection for CommunicationService"""
    return CommunicationService(db)


def to_response(application_type: str, comment) -> CommentResponse:
    descriptor = get_descriptor(application_type)
    return CommentResponse(
        id=comment.id,
        application_id=getattr(comment, descriptor.comment_fk_column),
        reviewer_id=comment.reviewer_id,
        comment_text=comment.comment_text,
        is_internal=comment.is_internal,
        created_at=comment.created_at,
        reviewer=CommentAuthor.model_validate(comment.reviewer) if comment.reviewer else None,
    )


@router.get("/{application_type}/{application_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    application_type: str,
    application_id: str,
    current_profile: Profile = Depends(get_current_profile),
    service: CommunicationService = Depends(get_communication_service),
):
    """Comment thread for an application; internal comments are shown to municipal staff only"""
    comments = service.list_comments(application_type, application_id, current_profile)
    return [to_response(application_type, comment) for comment in comments]


@router.post("/{application_type}/{application_id}/comments", response_model=CommentResponse)
async def create_comment(
    application_type: str,
    application_id: str,
    data: CommentCreate,
    current_profile: Profile = Depends(get_current_profile),
    service: CommunicationService = Depends(get_communication_service),
):
    """Post a comment to an application's thread"""
    comment = service.create_comment(
        application_type,
        application_id,
        current_profile,
        data.comment_text,
        is_internal=data.is_internal,
    )
    return to_response(application_type, comment)
