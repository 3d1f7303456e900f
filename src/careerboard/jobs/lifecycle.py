"""
Application lifecycle management.

Creates applications against eligible jobs and mediates every later change
to them: employer status transitions, applicant withdrawal, private notes and
follow-ups. Status changes all go through the transition table in
``careerboard.jobs.transitions``.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from careerboard.config import Settings, settings as default_settings
from careerboard.core.clock import Clock, utc_now
from careerboard.core.errors import (
    DuplicateApplicationError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from careerboard.core.models import (
    Application,
    ApplicationDetails,
    ApplicationStatus,
    Interview,
    PersonalNotes,
    StatusChange,
    UserProfile,
    UtcDatetime,
    to_document,
)
from careerboard.jobs.catalog import JobCatalog
from careerboard.jobs.transitions import (
    ACTION_FOR_STATUS,
    CLOSED_STATUSES,
    RESPONDED_STATUSES,
    Actor,
    LifecycleAction,
    allowed_sources,
    apply_transition,
    resolve_transition,
)
from careerboard.store.base import ASCENDING, DESCENDING, Document, DocumentNotFoundError, DocumentStore, DuplicateKeyError
from careerboard.utils.logging import get_logger, log_operation

logger = get_logger(__name__)

APPLICATIONS = "applications"

NEWEST_FIRST = [("created_at", DESCENDING)]

_personal_notes = TypeAdapter(PersonalNotes)


def needs_follow_up(
    application: Application,
    now: datetime,
    threshold_days: int = 14,
) -> bool:
    """
    Whether an open application has gone quiet long enough to warrant a follow-up.

    The clock starts at the employer's first response, else the last
    follow-up, else submission. Closed applications never need one.
    """
    if application.status in CLOSED_STATUSES:
        return False

    reference = application.response_date or application.last_follow_up or application.created_at
    elapsed_days = (now - reference) // timedelta(days=1)
    return elapsed_days >= threshold_days


def _round_percent(part: int, total: int) -> int:
    # Half-up rounding of 100 * part / total.
    if total == 0:
        return 0
    return (200 * part + total) // (2 * total)


class ApplicationFilters(BaseModel):
    """Optional, AND-combined filters for listing applications."""
    applicant_id: Optional[str] = Field(None, description="Only this applicant's applications")
    job_id: Optional[str] = Field(None, description="Only applications to this job")
    statuses: Optional[Set[ApplicationStatus]] = Field(None, description="Only these statuses")
    created_from: Optional[UtcDatetime] = Field(None, description="Created at or after")
    created_to: Optional[UtcDatetime] = Field(None, description="Created at or before")
    needs_follow_up: Optional[bool] = Field(None, description="Only applications needing a follow-up")

    @field_validator("statuses", mode="before")
    @classmethod
    def wrap_single_status(cls, value: Any) -> Any:
        if isinstance(value, (str, ApplicationStatus)):
            return {value}
        return value


class UserApplicationStats(BaseModel):
    """Application funnel metrics for one applicant."""
    total: int = Field(0, ge=0)
    by_status: Dict[ApplicationStatus, int] = Field(
        default_factory=lambda: {status: 0 for status in ApplicationStatus}
    )
    response_rate: int = Field(0, ge=0, le=100, description="Percent of applications that got a response")
    success_rate: int = Field(0, ge=0, le=100, description="Percent of applications that ended selected")


class ApplicationLifecycleManager:
    """Owns the Application entity and its status state machine."""

    def __init__(
        self,
        store: DocumentStore,
        catalog: JobCatalog,
        clock: Clock = utc_now,
        config: Optional[Settings] = None,
    ):
        self.logger = logger.bind(component="application_lifecycle")
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.config = config or default_settings

        self.store.create_index(APPLICATIONS, ["job_id", "applicant_id"], unique=True)

    async def _load(self, application_id: str) -> Application:
        document = await self.store.get(APPLICATIONS, application_id)
        if document is None:
            raise NotFoundError("application", application_id)
        return Application.model_validate(document)

    async def _load_owned(self, application_id: str, requester_id: str) -> Application:
        application = await self._load(application_id)
        if not application.is_owned_by(requester_id):
            self.logger.warning(
                "Rejected access to another user's application",
                application_id=application_id,
                requester_id=requester_id
            )
            raise UnauthorizedError("application", application_id, requester_id)
        return application

    async def _save(self, application: Application) -> Application:
        await self.store.replace(APPLICATIONS, to_document(application))
        return application

    def _validate_details(
        self,
        details: Union[ApplicationDetails, Mapping[str, Any]],
        now: datetime,
    ) -> ApplicationDetails:
        try:
            if isinstance(details, ApplicationDetails):
                # Instances built with model_construct skip validation.
                details = ApplicationDetails.model_validate(details.model_dump())
            else:
                details = ApplicationDetails.model_validate(dict(details))
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        if details.available_from is not None and details.available_from.date() < now.date():
            raise ValidationError.single("available_from", "Available from date cannot be in the past")

        return details

    async def create(
        self,
        job_id: str,
        applicant_id: str,
        details: Union[ApplicationDetails, Mapping[str, Any]],
        profile: Optional[UserProfile] = None,
    ) -> Application:
        """
        Submit a new application.

        Args:
            job_id: Job being applied to
            applicant_id: Resolved id of the applying user
            details: Applicant-supplied fields
            profile: Applicant profile, used to default the resume

        Returns:
            The stored application with a single "submitted" history entry
        """
        await self.catalog.get_eligible_job(job_id)

        existing = await self.store.find_one(
            APPLICATIONS,
            where=lambda doc: doc["job_id"] == job_id and doc["applicant_id"] == applicant_id,
        )
        if existing is not None:
            raise DuplicateApplicationError(job_id, applicant_id)

        now = self.clock()
        details = self._validate_details(details, now)

        fields = details.model_dump(exclude={"personal_notes"})
        if fields["resume"] is None and profile is not None:
            fields["resume"] = profile.resume

        application = Application(
            job_id=job_id,
            applicant_id=applicant_id,
            personal_notes=details.personal_notes,
            status=ApplicationStatus.SUBMITTED,
            status_history=[StatusChange(status=ApplicationStatus.SUBMITTED, changed_at=now)],
            created_at=now,
            updated_at=now,
            **fields,
        )

        try:
            await self.store.insert(APPLICATIONS, to_document(application))
        except DuplicateKeyError as e:
            raise DuplicateApplicationError(job_id, applicant_id) from e

        try:
            await self.catalog.increment_application_count(job_id)
        except Exception as e:
            self.logger.warning(
                "Failed to increment job application count",
                job_id=job_id,
                application_id=application.id,
                error=str(e)
            )

        self.logger.info(
            "Application submitted",
            **log_operation("create", application_id=application.id, job_id=job_id, applicant_id=applicant_id)
        )
        return application

    async def _transition(
        self,
        application: Application,
        action: LifecycleAction,
        note: Optional[str] = None,
    ) -> Application:
        transition = resolve_transition(application.status, action)
        if transition is None:
            raise InvalidTransitionError(
                application.id,
                application.status.value,
                action.value,
                allowed_from=[status.value for status in allowed_sources(action)],
            )

        previous = application.status
        updated = apply_transition(application, transition, self.clock(), note)
        if updated is application:
            return application

        await self._save(updated)
        self.logger.info(
            "Application status changed",
            application_id=application.id,
            from_status=previous.value,
            to_status=updated.status.value,
            actor=transition.actor.value
        )
        return updated

    async def transition_status(
        self,
        application_id: str,
        new_status: ApplicationStatus,
        note: Optional[str] = None,
    ) -> Application:
        """Employer-side status change."""
        new_status = ApplicationStatus(new_status)
        application = await self._load(application_id)

        if new_status == application.status:
            return application

        action = ACTION_FOR_STATUS.get(new_status)
        transition = resolve_transition(application.status, action) if action else None
        if action is None or transition is None or transition.actor != Actor.EMPLOYER:
            raise InvalidTransitionError(
                application_id,
                application.status.value,
                action.value if action else f"move to {new_status.value}",
                allowed_from=[status.value for status in allowed_sources(action)] if action else [],
            )

        return await self._transition(application, action, note)

    async def withdraw(
        self,
        application_id: str,
        requester_id: str,
        reason: Optional[str] = None,
    ) -> Application:
        """Applicant-side withdrawal."""
        application = await self._load_owned(application_id, requester_id)
        return await self._transition(application, LifecycleAction.WITHDRAW, reason)

    async def add_personal_note(self, application_id: str, requester_id: str, text: str) -> Application:
        """Overwrite the applicant's private notes."""
        application = await self._load_owned(application_id, requester_id)

        try:
            text = _personal_notes.validate_python(text)
        except PydanticValidationError as e:
            raise ValidationError.single("personal_notes", "Personal notes cannot exceed 1000 characters") from e

        updated = application.model_copy(update={"personal_notes": text, "updated_at": self.clock()})
        await self._save(updated)

        self.logger.debug("Personal notes updated", application_id=application_id)
        return updated

    async def record_follow_up(self, application_id: str, requester_id: str) -> Application:
        """Record that the applicant followed up on the application."""
        await self._load_owned(application_id, requester_id)

        try:
            count = await self.store.increment(APPLICATIONS, application_id, "follow_up_count", 1)
        except DocumentNotFoundError as e:
            raise NotFoundError("application", application_id) from e

        now = self.clock()
        application = await self._load(application_id)
        updated = application.model_copy(update={"last_follow_up": now, "updated_at": now})
        await self._save(updated)

        self.logger.info(
            "Follow-up recorded",
            application_id=application_id,
            follow_up_count=count
        )
        return updated

    async def get_for_applicant(self, application_id: str, requester_id: str) -> Application:
        return await self._load_owned(application_id, requester_id)

    async def get(self, application_id: str) -> Application:
        return await self._load(application_id)

    async def schedule_interview(
        self,
        application_id: str,
        interview: Interview,
        note: Optional[str] = None,
    ) -> Application:
        """Employer-side: record interview details and move the application to interview."""
        application = await self._load(application_id)
        details = interview.model_copy(update={"scheduled": True})

        if application.status != ApplicationStatus.INTERVIEW:
            application = await self._transition(application, LifecycleAction.INTERVIEW, note)

        updated = application.model_copy(update={"interview": details, "updated_at": self.clock()})
        await self._save(updated)

        self.logger.info(
            "Interview scheduled",
            application_id=application_id,
            date_time=details.date_time.isoformat() if details.date_time else None,
            mode=details.mode.value if details.mode else None
        )
        return updated

    async def mark_viewed(self, application_id: str) -> Application:
        """Employer-side: flag the application as opened."""
        application = await self._load(application_id)
        if application.viewed_by_employer:
            return application

        now = self.clock()
        updated = application.model_copy(update={"viewed_by_employer": True, "viewed_at": now})
        await self._save(updated)
        return updated

    def _matches(self, filters: ApplicationFilters, now: datetime):
        threshold = self.config.follow_up_threshold_days

        def predicate(document: Document) -> bool:
            if filters.applicant_id is not None and document["applicant_id"] != filters.applicant_id:
                return False
            if filters.job_id is not None and document["job_id"] != filters.job_id:
                return False
            if filters.statuses and ApplicationStatus(document["status"]) not in filters.statuses:
                return False
            if filters.created_from is not None and document["created_at"] < filters.created_from:
                return False
            if filters.created_to is not None and document["created_at"] > filters.created_to:
                return False
            if filters.needs_follow_up:
                return needs_follow_up(Application.model_validate(document), now, threshold)
            return True

        return predicate

    async def list_with_filters(
        self,
        filters: Optional[ApplicationFilters] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Application]:
        """Applications matching the filters, newest first."""
        filters = filters or ApplicationFilters()
        documents = await self.store.find(
            APPLICATIONS,
            where=self._matches(filters, self.clock()),
            sort=NEWEST_FIRST,
            skip=skip,
            limit=limit,
        )
        return [Application.model_validate(document) for document in documents]

    async def count_with_filters(self, filters: Optional[ApplicationFilters] = None) -> int:
        filters = filters or ApplicationFilters()
        return await self.store.count(APPLICATIONS, where=self._matches(filters, self.clock()))

    async def applied_job_ids(self, applicant_id: str) -> List[str]:
        return await self.store.distinct(
            APPLICATIONS, "job_id", where=lambda doc: doc["applicant_id"] == applicant_id
        )

    async def compute_user_stats(self, applicant_id: str) -> UserApplicationStats:
        """Per-status counts and response/success rates for an applicant."""
        documents = await self.store.find(
            APPLICATIONS, where=lambda doc: doc["applicant_id"] == applicant_id
        )

        by_status = {status: 0 for status in ApplicationStatus}
        for document in documents:
            by_status[ApplicationStatus(document["status"])] += 1

        total = len(documents)
        responded = sum(by_status[status] for status in RESPONDED_STATUSES)

        return UserApplicationStats(
            total=total,
            by_status=by_status,
            response_rate=_round_percent(responded, total),
            success_rate=_round_percent(by_status[ApplicationStatus.SELECTED], total),
        )

    async def count_needing_follow_up(self, applicant_id: str) -> int:
        return await self.count_with_filters(
            ApplicationFilters(applicant_id=applicant_id, needs_follow_up=True)
        )

    async def recently_updated(self, applicant_id: str, limit: int) -> List[Application]:
        documents = await self.store.find(
            APPLICATIONS,
            where=lambda doc: doc["applicant_id"] == applicant_id,
            sort=[("updated_at", DESCENDING)],
            limit=limit,
        )
        return [Application.model_validate(document) for document in documents]

    async def upcoming_interviews(self, applicant_id: str, limit: int) -> List[Application]:
        """Scheduled interviews from now on, soonest first."""
        now = self.clock()

        def predicate(document: Document) -> bool:
            interview = document.get("interview") or {}
            return (
                document["applicant_id"] == applicant_id
                and document["status"] == ApplicationStatus.INTERVIEW
                and bool(interview.get("scheduled"))
                and interview.get("date_time") is not None
                and interview["date_time"] >= now
            )

        documents = await self.store.find(
            APPLICATIONS, where=predicate, sort=[("interview.date_time", ASCENDING)], limit=limit
        )
        return [Application.model_validate(document) for document in documents]

