"""Workflow repository - Database operations shared by every application type"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import STAFF_ROLES, Profile
from .registry import ApplicationTypeDescriptor


class WorkflowRepository:
    """Repository for application status and reviewer writes"""

    @staticmethod
    def get_application(db: Session, descriptor: ApplicationTypeDescriptor, application_id: str):
        """Get an application by its key column"""
        return db.query(descriptor.model).filter(descriptor.key == application_id).first()

    @staticmethod
    def list_applications(
        db: Session,
        descriptor: ApplicationTypeDescriptor,
        customer_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        assigned_reviewer_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list:
        """List applications, newest first, with optional filters"""
        model = descriptor.model
        query = db.query(model)

        if customer_id:
            query = query.filter(model.customer_id == customer_id)
        if user_id:
            query = query.filter(model.user_id == user_id)
        if status and status != "all":
            query = query.filter(descriptor.status == status)
        if assigned_reviewer_id:
            query = query.filter(model.assigned_reviewer_id == assigned_reviewer_id)

        return query.order_by(model.created_at.desc()).offset(offset).limit(limit).all()

    @staticmethod
    def compare_and_set(
        db: Session,
        descriptor: ApplicationTypeDescriptor,
        application_id: str,
        expected_version: int,
        values: dict,
    ) -> int:
        """
        Update an application only if its version is still ``expected_version``.
        Bumps the version. Returns the number of rows updated (0 on a lost race).
        Does not commit.
        """
        model = descriptor.model
        values = {**values, "version": expected_version + 1}
        return (
            db.query(model)
            .filter(descriptor.key == application_id, model.version == expected_version)
            .update(values, synchronize_session=False)
        )

    @staticmethod
    def get_profile(db: Session, profile_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def list_staff(db: Session, customer_id: str) -> list[Profile]:
        """Municipal staff accounts of one municipality"""
        return (
            db.query(Profile)
            .filter(Profile.customer_id == customer_id, Profile.account_type.in_(STAFF_ROLES))
            .order_by(Profile.last_name.asc(), Profile.first_name.asc())
            .all()
        )

    @staticmethod
    def count_by_status(
        db: Session, descriptor: ApplicationTypeDescriptor, customer_id: str
    ) -> dict[str, int]:
        """Count a municipality's applications grouped by status"""
        rows = (
            db.query(descriptor.status, func.count(descriptor.key))
            .filter(descriptor.model.customer_id == customer_id)
            .group_by(descriptor.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def count_applications(
        db: Session,
        descriptor: ApplicationTypeDescriptor,
        statuses: tuple,
        customer_id: Optional[str] = None,
        assigned_reviewer_id: Optional[str] = None,
        updated_since: Optional[datetime] = None,
    ) -> int:
        model = descriptor.model
        query = db.query(func.count(descriptor.key)).filter(descriptor.status.in_(statuses))

        if customer_id:
            query = query.filter(model.customer_id == customer_id)
        if assigned_reviewer_id:
            query = query.filter(model.assigned_reviewer_id == assigned_reviewer_id)
        if updated_since:
            query = query.filter(model.updated_at >= updated_since)

        return query.scalar() or 0

    @staticmethod
    def find_stale_information_requests(
        db: Session,
        descriptor: ApplicationTypeDescriptor,
        cutoff: datetime,
        customer_id: Optional[str] = None,
    ) -> list:
        """Applications waiting on the applicant since before ``cutoff``, optionally for one municipality"""
        model = descriptor.model
        query = db.query(model).filter(
            descriptor.status == "information_requested",
            or_(
                model.information_requested_at < cutoff,
                (model.information_requested_at.is_(None)) & (model.updated_at < cutoff),
            ),
        )
        if customer_id:
            query = query.filter(model.customer_id == customer_id)
        return query.all()
