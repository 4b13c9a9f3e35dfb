"""Status vocabularies and transition tables for reviewable applications

Every application type starts in ``draft``. The tables here are the single source
of truth for which status changes the workflow service accepts.
"""

PERMIT = "permit"
BUSINESS_LICENSE = "business_license"
TAX_SUBMISSION = "tax_submission"
SERVICE_APPLICATION = "service_application"

APPLICATION_TYPES = (PERMIT, BUSINESS_LICENSE, TAX_SUBMISSION, SERVICE_APPLICATION)

INITIAL_STATUS = "draft"

STATUS_DISPLAY_NAMES = {
    "draft": "Draft",
    "submitted": "Submitted",
    "under_review": "Under Review",
    "information_requested": "Information Requested",
    "resubmitted": "Resubmitted",
    "approved": "Approved",
    "denied": "Denied",
    "withdrawn": "Withdrawn",
    "expired": "Expired",
    "rejected": "Rejected",
    "issued": "Issued",
    "reserved": "Reserved",
    "cancelled": "Cancelled",
}

_COMMON_DESCRIPTIONS = {
    "submitted": "Application has been received and is awaiting initial review",
    "under_review": "Application is actively being reviewed by municipal staff",
    "information_requested": "Reviewer has requested additional documentation or clarification from applicant",
    "resubmitted": "Applicant has submitted the requested follow-up information",
    "denied": "Application was reviewed but did not meet requirements. Explanation provided",
    "withdrawn": "Applicant has voluntarily withdrawn the application",
    "expired": "Application has been inactive past the allowable time window",
    "rejected": "Application was rejected during review process",
}

STATUS_DESCRIPTIONS = {
    PERMIT: {
        **_COMMON_DESCRIPTIONS,
        "draft": "Application is being prepared",
        "approved": "Permit has been approved and is ready for issuance",
        "issued": "Permit has been issued and is active",
    },
    BUSINESS_LICENSE: {
        **_COMMON_DESCRIPTIONS,
        "draft": "License application is being prepared",
        "approved": "License has been approved and is ready for issuance",
        "issued": "License has been issued and is active",
    },
    TAX_SUBMISSION: {
        **_COMMON_DESCRIPTIONS,
        "draft": "Tax return is being prepared",
        "submitted": "Tax return has been filed and is awaiting review",
        "approved": "Tax return has been accepted by the municipality",
        "rejected": "Tax return was rejected during review process",
    },
    SERVICE_APPLICATION: {
        **_COMMON_DESCRIPTIONS,
        "draft": "Application is being prepared",
        "approved": "Application has been approved and is ready for issuance",
        "rejected": "Application was reviewed but did not meet requirements. Explanation provided",
        "issued": "Service has been issued and is active",
        "reserved": "Time slot has been reserved and confirmed with payment",
        "cancelled": "Reservation has been cancelled by municipal staff or applicant",
    },
}

STATUS_TRANSITIONS = {
    PERMIT: {
        "draft": ["submitted"],
        "submitted": ["approved", "under_review", "withdrawn"],
        "under_review": ["information_requested", "approved", "denied", "rejected"],
        "information_requested": ["resubmitted", "withdrawn", "expired"],
        "resubmitted": ["under_review"],
        "approved": ["issued"],
        "denied": [],
        "withdrawn": [],
        "expired": [],
        "rejected": [],
        "issued": [],
    },
    BUSINESS_LICENSE: {
        "draft": ["submitted"],
        "submitted": ["under_review", "approved", "withdrawn"],
        "under_review": ["information_requested", "approved", "denied", "rejected"],
        "information_requested": ["resubmitted", "withdrawn", "expired"],
        "resubmitted": ["under_review"],
        "approved": ["issued", "withdrawn"],
        "denied": [],
        "withdrawn": [],
        "expired": [],
        "rejected": [],
        "issued": [],
    },
    TAX_SUBMISSION: {
        "draft": ["submitted"],
        "submitted": ["under_review", "approved", "rejected", "withdrawn"],
        "under_review": ["information_requested", "approved", "denied", "rejected"],
        "information_requested": ["resubmitted", "withdrawn", "expired"],
        "resubmitted": ["under_review"],
        "approved": [],
        "denied": [],
        "rejected": [],
        "withdrawn": [],
        "expired": [],
    },
    SERVICE_APPLICATION: {
        "draft": ["submitted"],
        "submitted": ["under_review", "approved", "rejected", "withdrawn"],
        "under_review": ["information_requested", "approved", "rejected"],
        "information_requested": ["resubmitted", "withdrawn", "expired"],
        "resubmitted": ["under_review"],
        "approved": ["issued"],
        "denied": [],
        "rejected": [],
        "withdrawn": [],
        "expired": [],
        "issued": [],
        "reserved": ["cancelled"],
        "cancelled": [],
    },
}

# Booked services skip issuance: an approved booking is either reserved or cancelled
_TIME_SLOT_APPROVED_TRANSITIONS = ["reserved", "cancelled"]

# Statuses an applicant (rather than staff) moves their own application into
APPLICANT_TRANSITIONS = {
    ("draft", "submitted"),
    ("information_requested", "resubmitted"),
    ("submitted", "withdrawn"),
    ("information_requested", "withdrawn"),
    ("approved", "withdrawn"),
}

# Statuses still waiting on a municipal decision
OPEN_REVIEW_STATUSES = ("submitted", "under_review", "information_requested")

# Statuses that count as a completed review for staff workload
COMPLETED_REVIEW_STATUSES = ("approved", "denied", "issued")

PERMIT_REVIEW_STATUS_MAP = {
    "draft": "pending",
    "submitted": "pending",
    "under_review": "under_review",
    "information_requested": "needs_revision",
    "resubmitted": "under_review",
    "approved": "approved",
    "denied": "rejected",
    "withdrawn": "rejected",
    "expired": "rejected",
    "rejected": "rejected",
    "issued": "approved",
}


def _table_for(application_type: str) -> dict[str, list[str]]:
    try:
        return STATUS_TRANSITIONS[application_type]
    except KeyError:
        raise ValueError(f"Unknown application type: {application_type}") from None


def get_status_vocabulary(application_type: str) -> list[str]:
    """All statuses valid for an application type, in lifecycle order"""
    return list(_table_for(application_type).keys())


def is_valid_status(application_type: str, status: str) -> bool:
    return status in _table_for(application_type)


def get_initial_status(application_type: str) -> str:
    _table_for(application_type)
    return INITIAL_STATUS


def get_valid_status_transitions(
    application_type: str, current_status: str, has_time_slots: bool = False
) -> list[str]:
    """
    Statuses reachable from ``current_status``.

    Unknown statuses have no outgoing transitions. For service applications that book a
    time slot, ``approved`` leads to ``reserved``/``cancelled`` instead of ``issued``.
    """
    table = _table_for(application_type)
    if (
        application_type == SERVICE_APPLICATION
        and has_time_slots
        and current_status == "approved"
    ):
        return list(_TIME_SLOT_APPROVED_TRANSITIONS)
    return list(table.get(current_status, []))


def can_transition(
    application_type: str, current_status: str, new_status: str, has_time_slots: bool = False
) -> bool:
    return new_status in get_valid_status_transitions(
        application_type, current_status, has_time_slots
    )


def is_terminal_status(
    application_type: str, status: str, has_time_slots: bool = False
) -> bool:
    return is_valid_status(application_type, status) and not get_valid_status_transitions(
        application_type, status, has_time_slots
    )


def get_status_display_name(status: str) -> str:
    return STATUS_DISPLAY_NAMES.get(status, status)


def get_status_description(application_type: str, status: str) -> str:
    return STATUS_DESCRIPTIONS.get(application_type, {}).get(status, "")


def map_to_municipal_review_status(status: str) -> str:
    """Derived review status kept on permits for the municipal review queue"""
    return PERMIT_REVIEW_STATUS_MAP.get(status, "pending")
