"""Tests for the workflow engine: transitions, versioning, reasons and permissions."""

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

from muniportal.domain.workflow.registry import get_descriptor
from muniportal.domain.workflow.repository import WorkflowRepository
from muniportal.domain.workflow.service import WorkflowService
from muniportal.domain.workflow.statuses import (
    BUSINESS_LICENSE,
    PERMIT,
    SERVICE_APPLICATION,
    TAX_SUBMISSION,
)
from muniportal.models import PermitApplication, PermitComment, TaxSubmissionComment


def test_invalid_transition_is_rejected_before_writing(db, make_application, staff):
    permit = make_application(PERMIT, status="draft")

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "approved", staff)

    assert exc.value.status_code == 422
    assert "Invalid status transition" in exc.value.detail
    db.refresh(permit)
    assert permit.application_status == "draft"
    assert permit.version == 1


def test_unknown_status_is_rejected(db, make_application, staff):
    permit = make_application(PERMIT, status="submitted")

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "archived", staff)

    assert exc.value.status_code == 422


def test_valid_transition_stamps_timestamp_and_bumps_version(db, make_application, staff):
    permit = make_application(PERMIT, status="submitted")

    updated = WorkflowService(db).update_status(PERMIT, permit.permit_id, "under_review", staff)

    assert updated.application_status == "under_review"
    assert updated.under_review_at is not None
    assert updated.municipal_review_status == "under_review"
    assert updated.version == 2


def test_stale_expected_version_conflicts(db, make_application, staff):
    permit = make_application(PERMIT, status="submitted")

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(
            PERMIT, permit.permit_id, "under_review", staff, expected_version=5
        )

    assert exc.value.status_code == 409


def test_lost_race_conflicts_and_leaves_row_untouched(db, make_application, staff):
    permit = make_application(PERMIT, status="submitted")
    descriptor = get_descriptor(PERMIT)

    # Someone else writes between our read and our update
    db.query(PermitApplication).filter(PermitApplication.permit_id == permit.permit_id).update(
        {"version": 7}, synchronize_session=False
    )

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).apply_transition(descriptor, permit, "under_review")

    assert exc.value.status_code == 409
    db.refresh(permit)
    assert permit.application_status == "submitted"


def test_denial_reason_is_stored_and_posted_as_comment(db, make_application, staff):
    permit = make_application(PERMIT, status="under_review")

    updated = WorkflowService(db).update_status(
        PERMIT, permit.permit_id, "denied", staff, reason="  Setback violation  "
    )

    assert updated.denial_reason == "Setback violation"
    assert updated.municipal_review_status == "rejected"
    comments = db.query(PermitComment).filter(PermitComment.permit_id == permit.permit_id).all()
    assert len(comments) == 1
    assert comments[0].comment_text == "Setback violation"
    assert comments[0].is_internal is False
    assert comments[0].reviewer_id == staff.id


def test_withdrawal_reason_is_stored_without_comment(db, make_application, resident):
    permit = make_application(PERMIT, status="submitted")

    updated = WorkflowService(db).update_status(
        PERMIT, permit.permit_id, "withdrawn", resident, reason="Project cancelled"
    )

    assert updated.withdrawal_reason == "Project cancelled"
    assert db.query(PermitComment).count() == 0


def test_tax_rejection_reason_uses_denial_column(db, make_application, staff):
    submission = make_application(TAX_SUBMISSION, status="submitted")

    updated = WorkflowService(db).update_status(
        TAX_SUBMISSION, submission.id, "rejected", staff, reason="Wrong period"
    )

    assert updated.denial_reason == "Wrong period"
    assert db.query(TaxSubmissionComment).count() == 1


def test_license_information_request_uses_reviewer_comments(db, make_application, staff):
    license_application = make_application(BUSINESS_LICENSE, status="under_review")

    updated = WorkflowService(db).update_status(
        BUSINESS_LICENSE,
        license_application.id,
        "information_requested",
        staff,
        reason="Upload your EIN letter",
    )

    assert updated.reviewer_comments == "Upload your EIN letter"
    assert updated.information_requested_at is not None


def test_applicant_may_submit_own_application(db, make_application, resident):
    permit = make_application(PERMIT, status="draft")

    updated = WorkflowService(db).update_status(PERMIT, permit.permit_id, "submitted", resident)

    assert updated.application_status == "submitted"
    assert updated.submitted_at is not None


def test_applicant_cannot_review(db, make_application, resident):
    permit = make_application(PERMIT, status="submitted")

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "approved", resident)

    assert exc.value.status_code == 403


def test_other_residents_cannot_see_application(db, make_application, make_profile):
    permit = make_application(PERMIT, status="submitted")
    stranger = make_profile("resident")

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "withdrawn", stranger)

    assert exc.value.status_code == 404


def test_staff_of_other_municipality_cannot_act(db, make_application, make_customer, make_profile):
    permit = make_application(PERMIT, status="submitted")
    elsewhere = make_customer("City of Elsewhere")
    outsider = make_profile("municipaladmin", customer_id=elsewhere.customer_id)

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "under_review", outsider)

    assert exc.value.status_code == 404


def test_time_slot_service_is_reserved_after_approval(db, make_application, make_tile, staff):
    tile = make_tile(has_time_slots=True, booking_mode="time_period")
    application = make_application(SERVICE_APPLICATION, status="approved", tile_id=tile.id)
    service = WorkflowService(db)

    with pytest.raises(HTTPException):
        service.update_status(SERVICE_APPLICATION, application.id, "issued", staff)

    updated = service.update_status(SERVICE_APPLICATION, application.id, "reserved", staff)
    assert updated.status == "reserved"
    assert updated.reserved_at is not None


def test_transitions_are_filtered_for_applicants(db, make_application, resident, staff):
    permit = make_application(PERMIT, status="submitted")
    service = WorkflowService(db)

    applicant_view = service.get_transitions(PERMIT, permit.permit_id, resident)
    staff_view = service.get_transitions(PERMIT, permit.permit_id, staff)

    assert [t["status"] for t in applicant_view["transitions"]] == ["withdrawn"]
    assert [t["status"] for t in staff_view["transitions"]] == [
        "approved",
        "under_review",
        "withdrawn",
    ]
    assert staff_view["version"] == 1
    assert applicant_view["transitions"][0]["requires_reason"] is True


def failing_write(error):
    """compare_and_set that performs the update, then fails like the database would"""
    real_compare_and_set = WorkflowRepository.compare_and_set

    def _write(db, descriptor, application_id, expected_version, values):
        real_compare_and_set(db, descriptor, application_id, expected_version, values)
        raise error

    return staticmethod(_write)


def test_integrity_error_maps_to_validation_error_and_rolls_back(
    db, make_application, staff, monkeypatch
):
    permit = make_application(PERMIT, status="under_review")
    error = IntegrityError("UPDATE permit_applications", {}, Exception("check constraint failed"))
    monkeypatch.setattr(WorkflowRepository, "compare_and_set", failing_write(error))

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(
            PERMIT, permit.permit_id, "denied", staff, reason="Setback violation"
        )

    assert exc.value.status_code == 422
    db.refresh(permit)
    assert permit.application_status == "under_review"
    assert permit.denial_reason is None
    assert permit.version == 1
    assert db.query(PermitComment).count() == 0


def test_other_database_errors_map_to_server_error_and_roll_back(
    db, make_application, staff, monkeypatch
):
    permit = make_application(PERMIT, status="submitted")
    error = OperationalError("UPDATE permit_applications", {}, Exception("database is locked"))
    monkeypatch.setattr(WorkflowRepository, "compare_and_set", failing_write(error))

    with pytest.raises(HTTPException) as exc:
        WorkflowService(db).update_status(PERMIT, permit.permit_id, "under_review", staff)

    assert exc.value.status_code == 500
    db.refresh(permit)
    assert permit.application_status == "submitted"
    assert permit.version == 1


def test_integrity_error_over_http(client, login, make_application, staff, monkeypatch):
    permit = make_application(PERMIT, status="submitted")
    error = IntegrityError("UPDATE permit_applications", {}, Exception("check constraint failed"))
    monkeypatch.setattr(WorkflowRepository, "compare_and_set", failing_write(error))
    login(staff)

    response = client.patch(
        f"/applications/permit/{permit.permit_id}/status", json={"status": "under_review"}
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid status transition. Please try a different status."
