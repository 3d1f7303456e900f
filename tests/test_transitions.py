"""Tests for the application status transition table."""

import pytest
from datetime import timedelta

from careerboard.core.models import Application, ApplicationStatus, StatusChange
from careerboard.jobs.transitions import (
    ACTION_TARGETS,
    DEFAULT_WITHDRAW_NOTE,
    TRANSITIONS,
    WITHDRAWABLE_STATUSES,
    Actor,
    LifecycleAction,
    allowed_sources,
    apply_transition,
    resolve_transition,
)

from helpers import START, VALID_COVER_LETTER


def submitted_application() -> Application:
    return Application(
        job_id="job-1",
        applicant_id="user-1",
        cover_letter=VALID_COVER_LETTER,
        status_history=[StatusChange(status=ApplicationStatus.SUBMITTED, changed_at=START)],
        created_at=START,
        updated_at=START,
    )


class TestTransitionTable:
    """Test which moves the table allows."""

    def test_nothing_leads_back_to_submitted(self):
        assert all(t.target != ApplicationStatus.SUBMITTED for t in TRANSITIONS.values())

    def test_withdrawn_is_terminal(self):
        assert not any(source == ApplicationStatus.WITHDRAWN for source, _ in TRANSITIONS)

    @pytest.mark.parametrize("status", list(ApplicationStatus))
    def test_withdraw_sources(self, status):
        transition = resolve_transition(status, LifecycleAction.WITHDRAW)
        if status in WITHDRAWABLE_STATUSES:
            assert transition is not None
            assert transition.actor == Actor.APPLICANT
            assert transition.default_note == DEFAULT_WITHDRAW_NOTE
        else:
            assert transition is None

    def test_employer_actions_from_any_open_or_decided_status(self):
        for action in (LifecycleAction.REVIEW, LifecycleAction.SELECT, LifecycleAction.REJECT):
            assert allowed_sources(action) == frozenset(ApplicationStatus) - {ApplicationStatus.WITHDRAWN}
            for source in allowed_sources(action):
                transition = resolve_transition(source, action)
                assert transition.actor == Actor.EMPLOYER
                assert transition.target == ACTION_TARGETS[action]


class TestApplyTransition:
    """Test history and response-date bookkeeping."""

    def test_first_move_sets_response_date(self):
        application = submitted_application()
        now = START + timedelta(days=2)

        updated = apply_transition(
            application,
            resolve_transition(application.status, LifecycleAction.REVIEW),
            now,
            "Looking at it",
        )

        assert updated.status == ApplicationStatus.UNDER_REVIEW
        assert updated.response_date == now
        assert updated.updated_at == now
        assert [change.status for change in updated.status_history] == [
            ApplicationStatus.SUBMITTED,
            ApplicationStatus.UNDER_REVIEW,
        ]
        assert updated.status_history[-1].notes == "Looking at it"
        # Original is untouched
        assert application.status == ApplicationStatus.SUBMITTED
        assert len(application.status_history) == 1

    def test_later_moves_keep_response_date(self):
        application = submitted_application()
        first = START + timedelta(days=1)
        second = START + timedelta(days=5)

        reviewed = apply_transition(
            application, resolve_transition(application.status, LifecycleAction.REVIEW), first
        )
        shortlisted = apply_transition(
            reviewed, resolve_transition(reviewed.status, LifecycleAction.SHORTLIST), second
        )

        assert shortlisted.response_date == first
        assert shortlisted.updated_at == second

    def test_same_status_is_no_op(self):
        application = submitted_application()
        reviewed = apply_transition(
            application,
            resolve_transition(application.status, LifecycleAction.REVIEW),
            START + timedelta(days=1),
        )

        again = apply_transition(
            reviewed,
            resolve_transition(reviewed.status, LifecycleAction.REVIEW),
            START + timedelta(days=2),
        )

        assert again is reviewed

    def test_withdraw_uses_default_note(self):
        application = submitted_application()
        withdrawn = apply_transition(
            application,
            resolve_transition(application.status, LifecycleAction.WITHDRAW),
            START + timedelta(hours=1),
        )

        assert withdrawn.status == ApplicationStatus.WITHDRAWN
        assert withdrawn.status_history[-1].notes == DEFAULT_WITHDRAW_NOTE

    def test_mismatched_source_rejected(self):
        application = submitted_application()
        transition = resolve_transition(ApplicationStatus.SHORTLISTED, LifecycleAction.SELECT)

        with pytest.raises(ValueError):
            apply_transition(application, transition, START)
