"""Workflow service - Status transitions and reviewer assignment for every application type"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import invalidate_municipality_cache
from ...models import MUNICIPAL_ROLES, STAFF_ROLES, Profile
from ...shared.clock import utcnow
from ..communication.repository import CommunicationRepository
from .registry import ApplicationTypeDescriptor, get_descriptor
from .repository import WorkflowRepository
from .statuses import (
    APPLICANT_TRANSITIONS,
    can_transition,
    get_status_description,
    get_status_display_name,
    get_valid_status_transitions,
    is_valid_status,
    map_to_municipal_review_status,
)

logger = logging.getLogger(__name__)

# A reason given with these transitions is also posted to the application's thread
REASON_COMMENT_STATUSES = ("denied", "rejected", "information_requested")
REASON_PROMPT_STATUSES = ("denied", "rejected", "information_requested", "withdrawn")


def is_staff_for(profile: Profile, record) -> bool:
    """Municipal staff of the application's municipality, or a super admin"""
    if profile.account_type == "superAdmin":
        return True
    return profile.account_type in MUNICIPAL_ROLES and profile.customer_id == record.customer_id


def can_view_application(profile: Profile, record) -> bool:
    return record.user_id == profile.id or is_staff_for(profile, record)


class WorkflowService:
    """Service layer for application workflow business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WorkflowRepository()

    def get_application(
        self, application_type: str, application_id: str, profile: Profile
    ) -> tuple[ApplicationTypeDescriptor, object]:
        """Get an application the caller is allowed to see"""
        descriptor = get_descriptor(application_type)
        record = self.repo.get_application(self.db, descriptor, application_id)
        if not record or not can_view_application(profile, record):
            raise HTTPException(status_code=404, detail=f"{descriptor.label} not found")
        return descriptor, record

    def list_applications(
        self,
        application_type: str,
        profile: Profile,
        status: Optional[str] = None,
        assigned_reviewer_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[ApplicationTypeDescriptor, list]:
        """Staff see their municipality's applications; applicants see their own"""
        descriptor = get_descriptor(application_type)

        filters = {"status": status, "assigned_reviewer_id": assigned_reviewer_id}
        if profile.is_municipal and profile.account_type != "superAdmin":
            filters["customer_id"] = profile.customer_id
        elif not profile.is_municipal:
            filters["user_id"] = profile.id

        records = self.repo.list_applications(
            self.db, descriptor, limit=limit, offset=offset, **filters
        )
        return descriptor, records

    def get_transitions(self, application_type: str, application_id: str, profile: Profile) -> dict:
        """Statuses the caller may move this application to next"""
        descriptor, record = self.get_application(application_type, application_id, profile)
        current_status = descriptor.record_status(record)
        staff = is_staff_for(profile, record)

        transitions = []
        for status in get_valid_status_transitions(
            application_type, current_status, descriptor.uses_time_slots(record)
        ):
            if not staff and (current_status, status) not in APPLICANT_TRANSITIONS:
                continue
            transitions.append(
                {
                    "status": status,
                    "display_name": get_status_display_name(status),
                    "description": get_status_description(application_type, status),
                    "requires_reason": status in REASON_PROMPT_STATUSES,
                }
            )

        return {
            "application_id": descriptor.record_id(record),
            "current_status": current_status,
            "version": record.version,
            "transitions": transitions,
        }

    def update_status(
        self,
        application_type: str,
        application_id: str,
        new_status: str,
        profile: Profile,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ):
        """
        Move an application to ``new_status``.

        The transition table is checked before anything is written; applicants may only
        perform their own transitions (submit, resubmit, withdraw) on applications they own.
        """
        descriptor, record = self.get_application(application_type, application_id, profile)
        current_status = descriptor.record_status(record)

        if (
            not is_staff_for(profile, record)
            and (current_status, new_status) not in APPLICANT_TRANSITIONS
        ):
            logger.warning(
                f"⚠️ Profile {profile.id} attempted staff-only transition "
                f"{current_status} → {new_status} on {descriptor.table_name} {application_id}"
            )
            raise HTTPException(
                status_code=403, detail="Only municipal staff can make this status change"
            )

        return self.apply_transition(
            descriptor,
            record,
            new_status,
            reason=reason,
            author_id=profile.id,
            expected_version=expected_version,
        )

    def apply_transition(
        self,
        descriptor: ApplicationTypeDescriptor,
        record,
        new_status: str,
        reason: Optional[str] = None,
        author_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ):
        """Validate and write a status change without caller checks (also used by automation)"""
        application_type = descriptor.application_type
        application_id = descriptor.record_id(record)
        current_status = descriptor.record_status(record)

        if not is_valid_status(application_type, new_status):
            raise HTTPException(
                status_code=422,
                detail=f"Unknown status '{new_status}' for {descriptor.label.lower()}",
            )

        if not can_transition(
            application_type, current_status, new_status, descriptor.uses_time_slots(record)
        ):
            logger.warning(
                f"⚠️ Rejected transition {current_status} → {new_status} "
                f"for {descriptor.table_name} {application_id}"
            )
            raise HTTPException(
                status_code=422,
                detail=(
                    f"Invalid status transition: {get_status_display_name(current_status)} "
                    f"cannot move to {get_status_display_name(new_status)}"
                ),
            )

        seen_version = record.version
        if expected_version is not None and expected_version != seen_version:
            raise HTTPException(
                status_code=409,
                detail=f"{descriptor.label} was modified by someone else. Reload and try again.",
            )

        now = utcnow()
        values = {descriptor.status_column: new_status, "updated_at": now}

        timestamp_column = descriptor.timestamp_columns.get(new_status)
        if timestamp_column:
            values[timestamp_column] = now

        reason = (reason or "").strip() or None
        reason_column = descriptor.reason_columns.get(new_status)
        if reason and reason_column:
            values[reason_column] = reason

        if descriptor.tracks_municipal_review_status:
            values["municipal_review_status"] = map_to_municipal_review_status(new_status)

        try:
            updated = self.repo.compare_and_set(
                self.db, descriptor, application_id, seen_version, values
            )
            if updated == 0:
                self.db.rollback()
                logger.warning(
                    f"⚠️ Version conflict on {descriptor.table_name} {application_id} "
                    f"(expected version {seen_version})"
                )
                raise HTTPException(
                    status_code=409,
                    detail=f"{descriptor.label} was modified by someone else. Reload and try again.",
                )

            if reason and author_id and new_status in REASON_COMMENT_STATUSES:
                self.db.add(
                    CommunicationRepository.build_comment(
                        descriptor, application_id, author_id, reason
                    )
                )

            self.db.commit()
        except HTTPException:
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.error(
                f"❌ Database rejected status change on {descriptor.table_name} {application_id}: {e.orig}"
            )
            raise HTTPException(
                status_code=422,
                detail="Invalid status transition. Please try a different status.",
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Error updating {descriptor.table_name} {application_id}: {e}")
            raise HTTPException(
                status_code=500, detail=f"Failed to update {descriptor.label.lower()} status"
            ) from e

        self.db.refresh(record)
        logger.info(
            f"✅ {descriptor.label} {application_id} status changed: {current_status} → {new_status}"
        )
        invalidate_municipality_cache(record.customer_id)
        return record

    def assign_reviewer(
        self,
        application_type: str,
        application_id: str,
        reviewer_id: str,
        profile: Profile,
        expected_version: Optional[int] = None,
    ):
        """Assign a staff reviewer; assigning the current reviewer again is a no-op"""
        descriptor, record = self.get_application(application_type, application_id, profile)
        if not is_staff_for(profile, record):
            raise HTTPException(status_code=403, detail="Only municipal staff can assign reviewers")

        if record.assigned_reviewer_id == reviewer_id:
            logger.info(
                f"ℹ️ Reviewer {reviewer_id} already assigned to {descriptor.table_name} {application_id}"
            )
            return record

        reviewer = self.repo.get_profile(self.db, reviewer_id)
        if not reviewer:
            raise HTTPException(status_code=422, detail="Reviewer not found")
        if reviewer.account_type not in STAFF_ROLES or reviewer.customer_id != record.customer_id:
            raise HTTPException(
                status_code=422, detail="Reviewer must be a staff member of this municipality"
            )

        return self._write_assignment(descriptor, record, reviewer_id, expected_version)

    def unassign_reviewer(
        self,
        application_type: str,
        application_id: str,
        profile: Profile,
        expected_version: Optional[int] = None,
    ):
        descriptor, record = self.get_application(application_type, application_id, profile)
        if not is_staff_for(profile, record):
            raise HTTPException(status_code=403, detail="Only municipal staff can assign reviewers")

        if record.assigned_reviewer_id is None:
            return record

        return self._write_assignment(descriptor, record, None, expected_version)

    def _write_assignment(
        self,
        descriptor: ApplicationTypeDescriptor,
        record,
        reviewer_id: Optional[str],
        expected_version: Optional[int],
    ):
        application_id = descriptor.record_id(record)
        seen_version = record.version
        if expected_version is not None and expected_version != seen_version:
            raise HTTPException(
                status_code=409,
                detail=f"{descriptor.label} was modified by someone else. Reload and try again.",
            )

        try:
            updated = self.repo.compare_and_set(
                self.db,
                descriptor,
                application_id,
                seen_version,
                {"assigned_reviewer_id": reviewer_id, "updated_at": utcnow()},
            )
            if updated == 0:
                self.db.rollback()
                raise HTTPException(
                    status_code=409,
                    detail=f"{descriptor.label} was modified by someone else. Reload and try again.",
                )
            self.db.commit()
        except HTTPException:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Error assigning reviewer on {descriptor.table_name} {application_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to assign reviewer") from e

        self.db.refresh(record)
        if reviewer_id:
            logger.info(f"✅ {descriptor.label} {application_id} assigned to reviewer {reviewer_id}")
        else:
            logger.info(f"✅ {descriptor.label} {application_id} reviewer unassigned")
        invalidate_municipality_cache(record.customer_id)
        return record
