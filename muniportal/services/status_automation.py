"""
Automated status transitions for municipal applications
Handles information_requested → expired once the applicant has been silent too long
Also provides the per-municipality status breakdown used by dashboards
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..cache import build_status_breakdown_key, cache
from ..config import INFORMATION_REQUEST_EXPIRY_DAYS
from ..domain.workflow.registry import APPLICATION_TYPE_REGISTRY
from ..domain.workflow.repository import WorkflowRepository
from ..domain.workflow.service import WorkflowService
from ..domain.workflow.statuses import get_status_vocabulary
from ..shared.clock import utcnow

logger = logging.getLogger(__name__)


def expire_stale_information_requests(
    db: Session,
    now: Optional[datetime] = None,
    days: int = INFORMATION_REQUEST_EXPIRY_DAYS,
    customer_id: Optional[str] = None,
) -> dict:
    """
    Expire applications that have waited on the applicant for more than ``days``
    Should be run as a scheduled job (daily cron)
    With ``customer_id`` only that municipality's applications are considered

    Each expiry goes through the workflow engine, so the transition table and
    version check still apply. A record that changed underneath us is skipped.

    Returns:
        dict: Summary of expirations per application type
    """
    now = now or utcnow()
    cutoff = now - timedelta(days=days)
    workflow = WorkflowService(db)

    summary = {application_type: 0 for application_type in APPLICATION_TYPE_REGISTRY}
    summary["skipped"] = 0

    try:
        for application_type, descriptor in APPLICATION_TYPE_REGISTRY.items():
            stale = WorkflowRepository.find_stale_information_requests(
                db, descriptor, cutoff, customer_id=customer_id
            )

            for record in stale:
                application_id = descriptor.record_id(record)
                try:
                    workflow.apply_transition(descriptor, record, "expired")
                except HTTPException as e:
                    summary["skipped"] += 1
                    logger.warning(
                        f"⚠️ Could not expire {descriptor.table_name} {application_id}: {e.detail}"
                    )
                    continue

                summary[application_type] += 1
                logger.info(
                    f"✅ {descriptor.label} {application_id} transitioned: information_requested → expired"
                )
    except Exception as e:
        logger.error(f"❌ Error expiring stale information requests: {str(e)}")
        db.rollback()
        raise

    total = sum(summary[application_type] for application_type in APPLICATION_TYPE_REGISTRY)
    summary["total_updated"] = total
    if total > 0:
        logger.info(f"📊 Status automation summary: {summary}")
    else:
        logger.debug("ℹ️ No stale information requests to expire")

    return summary


def get_status_breakdown(db: Session, customer_id: str) -> dict:
    """
    Count a municipality's applications per status for every application type
    Every status of the vocabulary is present, with zero when nothing is in it
    """
    cache_key = build_status_breakdown_key(customer_id)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    breakdown = {}
    for application_type, descriptor in APPLICATION_TYPE_REGISTRY.items():
        counts = {status: 0 for status in get_status_vocabulary(application_type)}
        for status, count in WorkflowRepository.count_by_status(db, descriptor, customer_id).items():
            if status in counts:
                counts[status] = count
        breakdown[application_type] = counts

    cache.set(cache_key, breakdown)
    return breakdown
