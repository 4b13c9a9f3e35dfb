"""Communication service - Comment visibility and posting rules"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import invalidate_municipality_cache
from ...models import MUNICIPAL_ROLES, Profile
from ..workflow.service import WorkflowService, is_staff_for
from .repository import CommunicationRepository

logger = logging.getLogger(__name__)


def can_see_internal_comments(account_type: str) -> bool:
    return account_type in MUNICIPAL_ROLES


class CommunicationService:
    """Service layer for application comment threads"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CommunicationRepository()
        self.workflow = WorkflowService(db)

    def list_comments(self, application_type: str, application_id: str, profile: Profile) -> list:
        """Comments visible to the caller, oldest first"""
        descriptor, _record = self.workflow.get_application(
            application_type, application_id, profile
        )
        return self.repo.list_comments(
            self.db,
            descriptor,
            application_id,
            include_internal=can_see_internal_comments(profile.account_type),
        )

    def create_comment(
        self,
        application_type: str,
        application_id: str,
        profile: Profile,
        text: str,
        is_internal: bool = False,
    ):
        """Append a comment to an application's thread"""
        descriptor, record = self.workflow.get_application(
            application_type, application_id, profile
        )

        text = (text or "").strip()
        if not text:
            raise HTTPException(status_code=422, detail="Please enter a comment.")

        if is_internal and not is_staff_for(profile, record):
            raise HTTPException(
                status_code=403, detail="Only municipal staff can post internal comments"
            )

        comment = self.repo.build_comment(
            descriptor, application_id, profile.id, text, is_internal=is_internal
        )
        try:
            comment = self.repo.create_comment(self.db, comment)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Error adding comment to {descriptor.table_name} {application_id}: {e}")
            raise HTTPException(
                status_code=500, detail="Failed to add comment. Please try again."
            ) from e

        visibility = "internal" if is_internal else "external"
        logger.info(
            f"💬 {visibility.capitalize()} comment {comment.id} added to "
            f"{descriptor.table_name} {application_id} by {profile.id}"
        )
        invalidate_municipality_cache(record.customer_id)
        return comment
