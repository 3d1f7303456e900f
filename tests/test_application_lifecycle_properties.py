"""Property-based tests for the application lifecycle."""

import asyncio
import pytest
from hypothesis import given, strategies as st, settings, HealthCheck
from hypothesis.stateful import RuleBasedStateMachine, rule, initialize, invariant
from datetime import timedelta

from careerboard.config import Settings
from careerboard.core.errors import InvalidTransitionError
from careerboard.core.models import Application, ApplicationStatus, StatusChange
from careerboard.jobs.lifecycle import needs_follow_up
from careerboard.jobs.transitions import CLOSED_STATUSES, WITHDRAWABLE_STATUSES
from careerboard.services import create_services
from careerboard.store.memory import InMemoryDocumentStore

from helpers import START, VALID_COVER_LETTER, FrozenClock, application_details, build_job


TEST_SETTINGS = Settings(_env_file=None, log_level="WARNING")

status_strategy = st.sampled_from(list(ApplicationStatus))
employer_status_strategy = st.sampled_from([
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.SELECTED,
    ApplicationStatus.REJECTED,
])


def fresh_services(clock):
    return create_services(store=InMemoryDocumentStore(), clock=clock, config=TEST_SETTINGS)


@st.composite
def application_strategy(draw):
    """Applications in arbitrary states with plausible timestamps."""
    status = draw(status_strategy)
    created_at = START + timedelta(minutes=draw(st.integers(min_value=0, max_value=60 * 24 * 30)))
    response_date = draw(st.one_of(
        st.none(),
        st.integers(min_value=0, max_value=60 * 24 * 60).map(lambda m: created_at + timedelta(minutes=m)),
    ))
    last_follow_up = draw(st.one_of(
        st.none(),
        st.integers(min_value=0, max_value=60 * 24 * 60).map(lambda m: created_at + timedelta(minutes=m)),
    ))

    return Application(
        job_id="job-1",
        applicant_id="user-1",
        cover_letter=VALID_COVER_LETTER,
        status=status,
        status_history=[StatusChange(status=ApplicationStatus.SUBMITTED, changed_at=created_at)],
        response_date=response_date,
        last_follow_up=last_follow_up,
        created_at=created_at,
        updated_at=created_at,
    )


class TestLifecycleProperties:
    """Property-based tests for lifecycle invariants."""

    @given(
        cover_letter=st.text(
            alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")),
            min_size=50,
            max_size=1500,
        )
    )
    @settings(max_examples=30, deadline=2000, suppress_health_check=[HealthCheck.too_slow])
    def test_creation_starts_history_with_submitted(self, cover_letter):
        """Property: every new application has a single submitted history entry."""
        async def run_test():
            clock = FrozenClock()
            services = fresh_services(clock)
            job = await services.catalog.add_job(build_job(clock))

            application = await services.lifecycle.create(
                job.id, "user-1", application_details(cover_letter=cover_letter)
            )

            assert application.status_history
            assert application.status_history[0].status == ApplicationStatus.SUBMITTED
            assert application.status_history[0].changed_at == application.created_at
            assert application.response_date is None

        asyncio.run(run_test())

    @given(path=st.lists(employer_status_strategy, min_size=1, max_size=8))
    @settings(max_examples=40, deadline=2000, suppress_health_check=[HealthCheck.too_slow])
    def test_response_date_set_exactly_once(self, path):
        """Property: response_date is stamped by the first move away from submitted and never again."""
        async def run_test():
            clock = FrozenClock()
            services = fresh_services(clock)
            job = await services.catalog.add_job(build_job(clock))
            application = await services.lifecycle.create(job.id, "user-1", application_details())

            first_response = None
            history_length = 1
            for status in path:
                now = clock.advance(hours=1)
                previous = application.status
                application = await services.lifecycle.transition_status(application.id, status)

                if status != previous:
                    history_length += 1
                    if first_response is None:
                        first_response = now

                assert application.response_date == first_response
                assert len(application.status_history) == history_length
                assert application.status_history[-1].status == application.status

        asyncio.run(run_test())

    @given(path=st.lists(employer_status_strategy, max_size=4))
    @settings(max_examples=40, deadline=2000, suppress_health_check=[HealthCheck.too_slow])
    def test_withdraw_allowed_iff_early_status(self, path):
        """Property: withdrawal succeeds exactly from submitted, under-review or shortlisted."""
        async def run_test():
            clock = FrozenClock()
            services = fresh_services(clock)
            job = await services.catalog.add_job(build_job(clock))
            application = await services.lifecycle.create(job.id, "user-1", application_details())

            for status in path:
                application = await services.lifecycle.transition_status(application.id, status)

            before = application.status
            if before in WITHDRAWABLE_STATUSES:
                withdrawn = await services.lifecycle.withdraw(application.id, "user-1")
                assert withdrawn.status == ApplicationStatus.WITHDRAWN
                assert len(withdrawn.status_history) == len(application.status_history) + 1
            else:
                with pytest.raises(InvalidTransitionError):
                    await services.lifecycle.withdraw(application.id, "user-1")
                assert (await services.lifecycle.get(application.id)).status == before

        asyncio.run(run_test())

    @given(application=application_strategy(), days=st.integers(min_value=0, max_value=120))
    @settings(max_examples=100, deadline=1000)
    def test_needs_follow_up_definition(self, application, days):
        """Property: follow-up is due iff open and whole days since the reference reach the threshold."""
        reference = application.response_date or application.last_follow_up or application.created_at
        now = reference + timedelta(days=days, hours=6)

        result = needs_follow_up(application, now, threshold_days=14)

        if application.status in CLOSED_STATUSES:
            assert result is False
        else:
            assert result == (days >= 14)

    @given(statuses=st.lists(employer_status_strategy, max_size=12))
    @settings(max_examples=30, deadline=3000, suppress_health_check=[HealthCheck.too_slow])
    def test_stats_counts_sum_to_total(self, statuses):
        """Property: per-status counts add up and rates stay within 0..100."""
        async def run_test():
            clock = FrozenClock()
            services = fresh_services(clock)

            for i, status in enumerate(statuses):
                job = await services.catalog.add_job(build_job(clock, title=f"Role {i}"))
                application = await services.lifecycle.create(job.id, "user-1", application_details())
                await services.lifecycle.transition_status(application.id, status)

            stats = await services.lifecycle.compute_user_stats("user-1")

            assert sum(stats.by_status.values()) == stats.total == len(statuses)
            assert 0 <= stats.response_rate <= 100
            assert 0 <= stats.success_rate <= 100
            if stats.total == 0:
                assert stats.response_rate == 0 and stats.success_rate == 0

        asyncio.run(run_test())


class ApplicationLifecycleStateMachine(RuleBasedStateMachine):
    """Stateful testing for one application driven by employer and applicant actions."""

    def __init__(self):
        super().__init__()
        self.clock = None
        self.services = None
        self.application = None
        self.history = []

    def _run(self, coroutine):
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coroutine)
        finally:
            loop.close()

    @initialize()
    def setup(self):
        """Initialize the state machine with a submitted application."""
        self.clock = FrozenClock()
        self.services = fresh_services(self.clock)

        async def _create():
            job = await self.services.catalog.add_job(build_job(self.clock))
            return await self.services.lifecycle.create(job.id, "user-1", application_details())

        self.application = self._run(_create())
        self.history = list(self.application.status_history)

    @rule(status=employer_status_strategy)
    def employer_moves(self, status):
        """Rule: employer changes the status."""
        self.clock.advance(hours=3)
        current = self.application.status

        try:
            updated = self._run(self.services.lifecycle.transition_status(self.application.id, status))
        except InvalidTransitionError:
            assert current == ApplicationStatus.WITHDRAWN
            return

        assert current != ApplicationStatus.WITHDRAWN
        self.application = updated

    @rule()
    def applicant_withdraws(self):
        """Rule: applicant tries to withdraw."""
        self.clock.advance(hours=1)
        current = self.application.status

        try:
            updated = self._run(self.services.lifecycle.withdraw(self.application.id, "user-1"))
        except InvalidTransitionError:
            assert current not in WITHDRAWABLE_STATUSES
            return

        assert current in WITHDRAWABLE_STATUSES
        self.application = updated

    @rule()
    def applicant_follows_up(self):
        """Rule: applicant records a follow-up."""
        self.clock.advance(days=2)
        self.application = self._run(
            self.services.lifecycle.record_follow_up(self.application.id, "user-1")
        )

    @invariant()
    def history_is_append_only(self):
        if self.application is None:
            return

        history = self.application.status_history
        assert history[:len(self.history)] == self.history
        assert history[0].status == ApplicationStatus.SUBMITTED
        assert history[-1].status == self.application.status
        self.history = list(history)

    @invariant()
    def response_date_matches_history(self):
        if self.application is None:
            return

        history = self.application.status_history
        if len(history) > 1:
            assert self.application.response_date == history[1].changed_at
        else:
            assert self.application.response_date is None

    @invariant()
    def stored_copy_matches(self):
        if self.application is None:
            return

        stored = self._run(self.services.lifecycle.get(self.application.id))
        assert stored == self.application


ApplicationLifecycleStateMachine.TestCase.settings = settings(
    max_examples=25, stateful_step_count=15, deadline=None
)
TestApplicationLifecycleStateMachine = ApplicationLifecycleStateMachine.TestCase
