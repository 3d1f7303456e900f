"""
careerboard: the core of a job board.

Job seekers browse and search listings, receive recommendations derived from
their profile, and submit applications that are tracked through a status
lifecycle with an append-only history.
"""

__version__ = "0.1.0"

from careerboard.core.errors import (
    CareerBoardError,
    DuplicateApplicationError,
    InvalidTransitionError,
    JobNotEligibleError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from careerboard.core.models import Application, ApplicationStatus, Job, UserProfile
from careerboard.services import Services, create_services

__all__ = [
    "CareerBoardError",
    "DuplicateApplicationError",
    "InvalidTransitionError",
    "JobNotEligibleError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "Application",
    "ApplicationStatus",
    "Job",
    "UserProfile",
    "Services",
    "create_services",
]
