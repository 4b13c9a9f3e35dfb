"""Tests for status vocabularies and transition tables."""

import pytest

from muniportal.domain.workflow.statuses import (
    APPLICATION_TYPES,
    BUSINESS_LICENSE,
    PERMIT,
    SERVICE_APPLICATION,
    TAX_SUBMISSION,
    can_transition,
    get_initial_status,
    get_status_description,
    get_status_display_name,
    get_status_vocabulary,
    get_valid_status_transitions,
    is_terminal_status,
    map_to_municipal_review_status,
)

COMMON_TERMINAL = {"denied", "withdrawn", "expired", "rejected"}

EXPECTED_TERMINAL = {
    PERMIT: COMMON_TERMINAL | {"issued"},
    BUSINESS_LICENSE: COMMON_TERMINAL | {"issued"},
    TAX_SUBMISSION: COMMON_TERMINAL | {"approved"},
    SERVICE_APPLICATION: COMMON_TERMINAL | {"issued", "cancelled"},
}


@pytest.mark.parametrize("application_type", APPLICATION_TYPES)
def test_terminal_statuses_have_no_transitions(application_type):
    terminal = {
        status
        for status in get_status_vocabulary(application_type)
        if not get_valid_status_transitions(application_type, status)
    }

    assert terminal == EXPECTED_TERMINAL[application_type]
    for status in terminal:
        assert is_terminal_status(application_type, status)


@pytest.mark.parametrize("application_type", APPLICATION_TYPES)
def test_draft_only_moves_to_submitted(application_type):
    assert get_initial_status(application_type) == "draft"
    assert get_valid_status_transitions(application_type, "draft") == ["submitted"]


def test_approved_is_terminal_only_for_tax_submissions():
    assert is_terminal_status(TAX_SUBMISSION, "approved")
    assert not is_terminal_status(PERMIT, "approved")
    assert not is_terminal_status(BUSINESS_LICENSE, "approved")
    assert not is_terminal_status(SERVICE_APPLICATION, "approved")


def test_tax_submissions_are_never_issued():
    assert "issued" not in get_status_vocabulary(TAX_SUBMISSION)


def test_type_specific_submitted_transitions():
    assert get_valid_status_transitions(PERMIT, "submitted") == [
        "approved",
        "under_review",
        "withdrawn",
    ]
    assert "withdrawn" in get_valid_status_transitions(BUSINESS_LICENSE, "approved")
    assert "withdrawn" not in get_valid_status_transitions(PERMIT, "approved")
    assert "rejected" in get_valid_status_transitions(TAX_SUBMISSION, "submitted")


def test_time_slot_services_reserve_instead_of_issue():
    assert get_valid_status_transitions(SERVICE_APPLICATION, "approved") == ["issued"]
    assert get_valid_status_transitions(
        SERVICE_APPLICATION, "approved", has_time_slots=True
    ) == ["reserved", "cancelled"]
    assert can_transition(SERVICE_APPLICATION, "reserved", "cancelled")


def test_unknown_status_has_no_transitions():
    assert get_valid_status_transitions(PERMIT, "archived") == []
    assert not is_terminal_status(PERMIT, "archived")


def test_unknown_application_type_raises():
    with pytest.raises(ValueError):
        get_valid_status_transitions("dog_license", "draft")


def test_display_names_and_descriptions():
    assert get_status_display_name("information_requested") == "Information Requested"
    assert get_status_display_name("something_else") == "something_else"
    assert get_status_description(PERMIT, "submitted")
    assert get_status_description(PERMIT, "nonexistent") == ""


@pytest.mark.parametrize(
    "status,review_status",
    [
        ("draft", "pending"),
        ("submitted", "pending"),
        ("resubmitted", "under_review"),
        ("information_requested", "needs_revision"),
        ("issued", "approved"),
        ("withdrawn", "rejected"),
    ],
)
def test_permit_municipal_review_status(status, review_status):
    assert map_to_municipal_review_status(status) == review_status
