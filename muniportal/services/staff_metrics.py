"""
Staff workload metrics for a municipality's review team
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..cache import build_staff_metrics_key, cache
from ..domain.workflow.registry import get_descriptor
from ..domain.workflow.repository import WorkflowRepository
from ..domain.workflow.statuses import (
    BUSINESS_LICENSE,
    COMPLETED_REVIEW_STATUSES,
    OPEN_REVIEW_STATUSES,
    PERMIT,
    SERVICE_APPLICATION,
)
from ..shared.clock import utcnow

logger = logging.getLogger(__name__)

# Queue name -> application type. Tax submissions are reviewed by finance, not here.
REVIEW_QUEUES = {
    "permits": PERMIT,
    "licenses": BUSINESS_LICENSE,
    "services": SERVICE_APPLICATION,
}

# Service applications are never "issued" by a reviewer
COMPLETED_STATUSES_BY_TYPE = {
    PERMIT: COMPLETED_REVIEW_STATUSES,
    BUSINESS_LICENSE: COMPLETED_REVIEW_STATUSES,
    SERVICE_APPLICATION: ("approved", "denied"),
}


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def get_staff_metrics(db: Session, customer_id: str, now: Optional[datetime] = None) -> dict:
    """
    Review queue sizes and per-reviewer workload

    Returns:
        dict: review_queue (per queue plus total), staff_workload sorted by
        assigned_count descending, total_staff
    """
    cache_key = build_staff_metrics_key(customer_id)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    now = now or utcnow()
    since = month_start(now)

    review_queue = {}
    for queue, application_type in REVIEW_QUEUES.items():
        review_queue[queue] = WorkflowRepository.count_applications(
            db, get_descriptor(application_type), OPEN_REVIEW_STATUSES, customer_id=customer_id
        )
    review_queue["total"] = sum(review_queue.values())

    staff = WorkflowRepository.list_staff(db, customer_id)
    workload = []
    for member in staff:
        assigned = 0
        completed = 0
        for application_type in REVIEW_QUEUES.values():
            descriptor = get_descriptor(application_type)
            assigned += WorkflowRepository.count_applications(
                db, descriptor, OPEN_REVIEW_STATUSES, assigned_reviewer_id=member.id
            )
            completed += WorkflowRepository.count_applications(
                db,
                descriptor,
                COMPLETED_STATUSES_BY_TYPE[application_type],
                assigned_reviewer_id=member.id,
                updated_since=since,
            )

        workload.append(
            {
                "staff_id": member.id,
                "staff_name": member.full_name or member.email,
                "assigned_count": assigned,
                "completed_this_month": completed,
            }
        )

    workload.sort(key=lambda entry: entry["assigned_count"], reverse=True)

    metrics = {
        "review_queue": review_queue,
        "staff_workload": workload,
        "total_staff": len(staff),
    }
    logger.debug(f"📊 Staff metrics for {customer_id}: {review_queue['total']} in queue, {len(staff)} staff")

    cache.set(cache_key, metrics)
    return metrics
