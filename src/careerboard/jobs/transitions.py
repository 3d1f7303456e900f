"""Application status state machine.

Statuses follow a typical progression

    submitted -> under-review -> shortlisted -> interview -> selected | rejected

which employers are free to skip through or revisit. ``withdrawn`` is a
terminal side-state that only the applicant can enter, and only from
submitted, under-review or shortlisted. No transition leads back to
``submitted``.

The table below is the single source of truth for which (status, action)
pairs are legal; every lifecycle operation goes through ``apply_transition``
so that history and response-date bookkeeping happen in one place.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from careerboard.core.models import Application, ApplicationStatus, StatusChange


class LifecycleAction(str, Enum):
    """Actions that move an application between statuses."""
    REVIEW = "review"
    SHORTLIST = "shortlist"
    INTERVIEW = "interview"
    SELECT = "select"
    REJECT = "reject"
    WITHDRAW = "withdraw"


class Actor(str, Enum):
    """Who may perform an action."""
    EMPLOYER = "employer"
    APPLICANT = "applicant"


ACTION_TARGETS: Mapping[LifecycleAction, ApplicationStatus] = MappingProxyType({
    LifecycleAction.REVIEW: ApplicationStatus.UNDER_REVIEW,
    LifecycleAction.SHORTLIST: ApplicationStatus.SHORTLISTED,
    LifecycleAction.INTERVIEW: ApplicationStatus.INTERVIEW,
    LifecycleAction.SELECT: ApplicationStatus.SELECTED,
    LifecycleAction.REJECT: ApplicationStatus.REJECTED,
    LifecycleAction.WITHDRAW: ApplicationStatus.WITHDRAWN,
})

ACTION_FOR_STATUS: Mapping[ApplicationStatus, LifecycleAction] = MappingProxyType(
    {target: action for action, target in ACTION_TARGETS.items()}
)

EMPLOYER_ACTIONS: FrozenSet[LifecycleAction] = frozenset({
    LifecycleAction.REVIEW,
    LifecycleAction.SHORTLIST,
    LifecycleAction.INTERVIEW,
    LifecycleAction.SELECT,
    LifecycleAction.REJECT,
})

WITHDRAWABLE_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
})

CLOSED_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.SELECTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
})

ACTIVE_STATUSES: FrozenSet[ApplicationStatus] = frozenset(set(ApplicationStatus) - CLOSED_STATUSES)

# Statuses that count as "the employer responded" in the funnel metrics.
RESPONDED_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.SELECTED,
})

DEFAULT_WITHDRAW_NOTE = "Application withdrawn by candidate"


@dataclass(frozen=True)
class Transition:
    """A legal move in the state machine."""
    source: ApplicationStatus
    action: LifecycleAction
    target: ApplicationStatus
    actor: Actor
    default_note: Optional[str] = None


def _build_transition_table() -> Dict[Tuple[ApplicationStatus, LifecycleAction], Transition]:
    table: Dict[Tuple[ApplicationStatus, LifecycleAction], Transition] = {}

    for source in ApplicationStatus:
        if source != ApplicationStatus.WITHDRAWN:
            for action in EMPLOYER_ACTIONS:
                table[(source, action)] = Transition(
                    source=source,
                    action=action,
                    target=ACTION_TARGETS[action],
                    actor=Actor.EMPLOYER,
                )

        if source in WITHDRAWABLE_STATUSES:
            table[(source, LifecycleAction.WITHDRAW)] = Transition(
                source=source,
                action=LifecycleAction.WITHDRAW,
                target=ApplicationStatus.WITHDRAWN,
                actor=Actor.APPLICANT,
                default_note=DEFAULT_WITHDRAW_NOTE,
            )

    return table


TRANSITIONS: Mapping[Tuple[ApplicationStatus, LifecycleAction], Transition] = MappingProxyType(
    _build_transition_table()
)


def resolve_transition(status: ApplicationStatus, action: LifecycleAction) -> Optional[Transition]:
    """Look up the transition for an action from a status, or None if illegal."""
    return TRANSITIONS.get((status, action))


def allowed_sources(action: LifecycleAction) -> FrozenSet[ApplicationStatus]:
    """Statuses from which an action is legal."""
    return frozenset(source for (source, candidate) in TRANSITIONS if candidate == action)


def apply_transition(
    application: Application,
    transition: Transition,
    now: datetime,
    note: Optional[str] = None,
) -> Application:
    """
    Return a copy of the application after the transition.

    Moving to the current status is a no-op. Otherwise a history entry is
    appended, and the first move away from ``submitted`` stamps
    ``response_date``.
    """
    if transition.source != application.status:
        raise ValueError(
            f"transition from {transition.source.value} applied to {application.status.value} application"
        )

    if transition.target == application.status:
        return application

    history = list(application.status_history)
    history.append(StatusChange(
        status=transition.target,
        changed_at=now,
        notes=note or transition.default_note,
    ))

    return application.model_copy(update={
        "status": transition.target,
        "status_history": history,
        "response_date": application.response_date or now,
        "updated_at": now,
    })
