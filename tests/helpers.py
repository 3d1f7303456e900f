"""Builders shared by the careerboard tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from careerboard.core.models import (
    ExperienceLevel,
    Job,
    JobCategory,
    JobType,
    UserProfile,
    WorkMode,
)

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

VALID_COVER_LETTER = (
    "I have five years of experience building web applications and would love to join your team."
)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def build_job(clock: FrozenClock, **overrides: Any) -> Job:
    """A valid, eligible job; any field can be overridden."""
    fields: Dict[str, Any] = {
        "title": "Frontend Engineer",
        "company": "Acme",
        "description": "Build delightful interfaces for our customers.",
        "requirements": "Three years of frontend work.",
        "location": "Bangalore",
        "job_type": JobType.FULL_TIME,
        "work_mode": WorkMode.HYBRID,
        "experience_level": ExperienceLevel.MID,
        "category": JobCategory.TECHNOLOGY,
        "skills": ["React", "TypeScript"],
        "application_deadline": clock() + timedelta(days=30),
        "company_email": "jobs@acme.example",
    }
    fields.update(overrides)
    return Job(**fields)


def build_profile(**overrides: Any) -> UserProfile:
    fields: Dict[str, Any] = {
        "name": "Asha Rao",
        "email": "asha@example.com",
        "resume": "/uploads/resumes/asha.pdf",
        "skills": ["React"],
    }
    fields.update(overrides)
    return UserProfile(**fields)


def application_details(**overrides: Any) -> Dict[str, Any]:
    details: Dict[str, Any] = {"cover_letter": VALID_COVER_LETTER}
    details.update(overrides)
    return details
