"""Application type descriptors - table and column names the workflow engine writes to"""

from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException

from ...models import (
    BusinessLicenseApplication,
    BusinessLicenseComment,
    PermitApplication,
    PermitComment,
    ServiceApplication,
    ServiceApplicationComment,
    TaxSubmission,
    TaxSubmissionComment,
)
from .statuses import BUSINESS_LICENSE, PERMIT, SERVICE_APPLICATION, TAX_SUBMISSION

_REVIEW_TIMESTAMPS = {
    "submitted": "submitted_at",
    "under_review": "under_review_at",
    "information_requested": "information_requested_at",
    "resubmitted": "resubmitted_at",
    "approved": "approved_at",
    "denied": "denied_at",
    "withdrawn": "withdrawn_at",
    "expired": "expired_at",
}


@dataclass(frozen=True)
class ApplicationTypeDescriptor:
    application_type: str
    label: str
    model: Any
    comment_model: Any
    key_column: str
    status_column: str
    comment_fk_column: str
    # status -> column receiving the reason supplied with that status change
    reason_columns: dict = field(default_factory=dict)
    # status -> column stamped when the application enters that status
    timestamp_columns: dict = field(default_factory=dict)
    tracks_municipal_review_status: bool = False

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def key(self):
        return getattr(self.model, self.key_column)

    @property
    def status(self):
        return getattr(self.model, self.status_column)

    def record_id(self, record) -> str:
        return getattr(record, self.key_column)

    def record_status(self, record) -> str:
        return getattr(record, self.status_column)

    def uses_time_slots(self, record) -> bool:
        """Service applications for a bookable tile reserve a slot instead of being issued"""
        if self.application_type != SERVICE_APPLICATION:
            return False
        tile = getattr(record, "tile", None)
        return bool(tile and tile.has_time_slots)


APPLICATION_TYPE_REGISTRY = {
    PERMIT: ApplicationTypeDescriptor(
        application_type=PERMIT,
        label="Permit",
        model=PermitApplication,
        comment_model=PermitComment,
        key_column="permit_id",
        status_column="application_status",
        comment_fk_column="permit_id",
        reason_columns={
            "denied": "denial_reason",
            "withdrawn": "withdrawal_reason",
            "information_requested": "information_request_reason",
        },
        timestamp_columns={**_REVIEW_TIMESTAMPS, "issued": "issued_at"},
        tracks_municipal_review_status=True,
    ),
    BUSINESS_LICENSE: ApplicationTypeDescriptor(
        application_type=BUSINESS_LICENSE,
        label="License",
        model=BusinessLicenseApplication,
        comment_model=BusinessLicenseComment,
        key_column="id",
        status_column="application_status",
        comment_fk_column="license_id",
        reason_columns={
            "denied": "denial_reason",
            "withdrawn": "reviewer_comments",
            "information_requested": "reviewer_comments",
        },
        timestamp_columns={**_REVIEW_TIMESTAMPS, "issued": "issued_at"},
    ),
    TAX_SUBMISSION: ApplicationTypeDescriptor(
        application_type=TAX_SUBMISSION,
        label="Tax submission",
        model=TaxSubmission,
        comment_model=TaxSubmissionComment,
        key_column="id",
        status_column="submission_status",
        comment_fk_column="submission_id",
        reason_columns={
            "denied": "denial_reason",
            "rejected": "denial_reason",
            "withdrawn": "reviewer_comments",
            "information_requested": "reviewer_comments",
        },
        timestamp_columns=dict(_REVIEW_TIMESTAMPS),
    ),
    SERVICE_APPLICATION: ApplicationTypeDescriptor(
        application_type=SERVICE_APPLICATION,
        label="Application",
        model=ServiceApplication,
        comment_model=ServiceApplicationComment,
        key_column="id",
        status_column="status",
        comment_fk_column="application_id",
        reason_columns={
            "denied": "denial_reason",
            "rejected": "denial_reason",
            "information_requested": "information_request_reason",
            "withdrawn": "withdrawal_reason",
        },
        timestamp_columns={
            **_REVIEW_TIMESTAMPS,
            "issued": "issued_at",
            "reserved": "reserved_at",
            "cancelled": "cancelled_at",
        },
    ),
}


def get_descriptor(application_type: str) -> ApplicationTypeDescriptor:
    """Resolve an application type, raising 404 for unknown types"""
    descriptor = APPLICATION_TYPE_REGISTRY.get(application_type)
    if not descriptor:
        raise HTTPException(
            status_code=404, detail=f"Unknown application type: {application_type}"
        )
    return descriptor
