"""
API endpoints for status automation and review analytics
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_municipal_profile
from ..database import get_db
from ..models import Profile
from ..services.staff_metrics import get_staff_metrics
from ..services.status_automation import expire_stale_information_requests, get_status_breakdown

router = APIRouter(prefix="/status", tags=["status"])


class StatusBreakdown(BaseModel):
    customer_id: str
    permit: dict[str, int]
    business_license: dict[str, int]
    tax_submission: dict[str, int]
    service_application: dict[str, int]


class ReviewQueue(BaseModel):
    permits: int
    licenses: int
    services: int
    total: int


class StaffWorkload(BaseModel):
    staff_id: str
    staff_name: str
    assigned_count: int
    completed_this_month: int


class StaffMetrics(BaseModel):
    review_queue: ReviewQueue
    staff_workload: list[StaffWorkload]
    total_staff: int


class AutomationResult(BaseModel):
    permit: int
    business_license: int
    tax_submission: int
    service_application: int
    skipped: int
    total_updated: int


def resolve_customer_id(profile: Profile, customer_id: Optional[str]) -> str:
    """Staff see their own municipality; super admins must name one"""
    if profile.account_type == "superAdmin":
        target = customer_id or profile.customer_id
    else:
        if customer_id and customer_id != profile.customer_id:
            raise HTTPException(status_code=403, detail="Not authorized for this municipality")
        target = profile.customer_id

    if not target:
        raise HTTPException(status_code=400, detail="customer_id is required")
    return target


@router.get("/analytics", response_model=StatusBreakdown)
async def get_status_analytics(
    customer_id: Optional[str] = Query(None),
    profile: Profile = Depends(get_municipal_profile),
    db: Session = Depends(get_db),
):
    """Get count of applications by status for the caller's municipality"""
    target = resolve_customer_id(profile, customer_id)
    breakdown = get_status_breakdown(db, target)
    return StatusBreakdown(customer_id=target, **breakdown)


@router.get("/staff-metrics", response_model=StaffMetrics)
async def get_staff_metrics_endpoint(
    customer_id: Optional[str] = Query(None),
    profile: Profile = Depends(get_municipal_profile),
    db: Session = Depends(get_db),
):
    """Review queue sizes and per-reviewer workload"""
    target = resolve_customer_id(profile, customer_id)
    return get_staff_metrics(db, target)


@router.post("/automation/run", response_model=AutomationResult)
async def run_status_automation(
    customer_id: Optional[str] = Query(None),
    profile: Profile = Depends(get_municipal_profile),
    db: Session = Depends(get_db),
):
    """
    Manually trigger status automation for the caller's municipality
    Super admins may name one, or omit customer_id to run for every municipality
    (In production this runs from the ARQ cron in worker.py)
    """
    if profile.account_type == "superAdmin":
        target = customer_id
    else:
        target = resolve_customer_id(profile, customer_id)
    result = expire_stale_information_requests(db, customer_id=target)
    return AutomationResult(**result)
