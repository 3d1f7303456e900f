"""Typed failures raised by the careerboard core.

The core never renders user-facing text. Each failure carries structured
attributes so that presentation layers (HTTP handlers, CLI scripts) can decide
how to report it.
"""

from typing import Any, Dict, Iterable, Optional


class CareerBoardError(Exception):
    """Base class for all domain failures."""

    code: str = "careerboard_error"

    def details(self) -> Dict[str, Any]:
        """Structured payload describing the failure."""
        return {}


class ValidationError(CareerBoardError):
    """One or more fields violate their constraints."""

    code = "validation_error"

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: message})

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Collapse a pydantic ValidationError into one message per field."""
        errors: Dict[str, str] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
            errors.setdefault(field, error.get("msg", "invalid value"))
        return cls(errors)

    def details(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class NotFoundError(CareerBoardError):
    """An entity id does not resolve."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")

    def details(self) -> Dict[str, Any]:
        return {"entity": self.entity, "entity_id": self.entity_id}


class UnauthorizedError(CareerBoardError):
    """The resolved user does not own the entity."""

    code = "unauthorized"

    def __init__(self, entity: str, entity_id: str, user_id: str):
        self.entity = entity
        self.entity_id = entity_id
        self.user_id = user_id
        super().__init__(f"user {user_id} does not own {entity} {entity_id}")

    def details(self) -> Dict[str, Any]:
        return {"entity": self.entity, "entity_id": self.entity_id}


class JobNotEligibleError(CareerBoardError):
    """The job is closed or past its deadline at the time of the action."""

    code = "job_not_eligible"

    def __init__(self, job_id: str, reason: str):
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"job {job_id} is not accepting applications ({reason})")

    def details(self) -> Dict[str, Any]:
        return {"job_id": self.job_id, "reason": self.reason}


class DuplicateApplicationError(CareerBoardError):
    """An application already exists for the (job, applicant) pair."""

    code = "duplicate_application"

    def __init__(self, job_id: str, applicant_id: str):
        self.job_id = job_id
        self.applicant_id = applicant_id
        super().__init__(f"applicant {applicant_id} already applied to job {job_id}")

    def details(self) -> Dict[str, Any]:
        return {"job_id": self.job_id}


class InvalidTransitionError(CareerBoardError):
    """A status-dependent operation was attempted from a disallowed state."""

    code = "invalid_transition"

    def __init__(
        self,
        application_id: str,
        current: str,
        action: str,
        allowed_from: Optional[Iterable[str]] = None,
    ):
        self.application_id = application_id
        self.current = current
        self.action = action
        self.allowed_from = sorted(allowed_from) if allowed_from is not None else []
        super().__init__(f"cannot {action} application {application_id} while {current}")

    def details(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "current_status": self.current,
            "action": self.action,
            "allowed_from": self.allowed_from,
        }
