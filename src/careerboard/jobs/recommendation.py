"""
Job recommendations derived from a user's profile.

``build_criteria`` turns a profile snapshot into a ``RecommendationCriteria``
value without touching storage; ``RecommendationEngine`` runs that value
against the job catalog.
"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from careerboard.core.models import (
    ExperienceBucket,
    ExperienceLevel,
    Job,
    JobCategory,
    JobType,
    UserProfile,
    WorkMode,
)
from careerboard.jobs.catalog import JobCatalog, has_any_skill
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)


EXPERIENCE_LEVEL_MAP: Mapping[ExperienceBucket, FrozenSet[ExperienceLevel]] = {
    ExperienceBucket.FRESHER: frozenset({ExperienceLevel.ENTRY}),
    ExperienceBucket.UNDER_ONE_YEAR: frozenset({ExperienceLevel.ENTRY}),
    ExperienceBucket.ONE_TO_THREE_YEARS: frozenset({ExperienceLevel.ENTRY, ExperienceLevel.MID}),
    ExperienceBucket.THREE_TO_FIVE_YEARS: frozenset({ExperienceLevel.MID, ExperienceLevel.SENIOR}),
    ExperienceBucket.FIVE_PLUS_YEARS: frozenset({ExperienceLevel.SENIOR, ExperienceLevel.EXECUTIVE}),
}


class RecommendationCriteria(BaseModel):
    """
    Structured filter derived from a profile.

    A ``None`` field places no constraint. When both ``skills`` and
    ``locations`` are present a job needs to match only one of them.
    """
    model_config = ConfigDict(frozen=True)

    skills: Optional[FrozenSet[str]] = Field(None, description="Job must require one of these skills")
    experience_levels: Optional[FrozenSet[ExperienceLevel]] = Field(None, description="Allowed experience levels")
    locations: Optional[FrozenSet[str]] = Field(None, description="Preferred locations, lower-cased")
    job_types: Optional[FrozenSet[JobType]] = Field(None, description="Allowed job types")
    work_modes: Optional[FrozenSet[WorkMode]] = Field(None, description="Allowed work modes")
    categories: Optional[FrozenSet[JobCategory]] = Field(None, description="Allowed categories")

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())

    def matches(self, job: Job) -> bool:
        """Whether a job satisfies every present criterion."""
        if self.skills is not None or self.locations is not None:
            skill_match = self.skills is not None and has_any_skill(job, self.skills)
            location_match = self.locations is not None and job.location.strip().lower() in self.locations
            if not (skill_match or location_match):
                return False

        if self.experience_levels is not None and job.experience_level not in self.experience_levels:
            return False
        if self.job_types is not None and job.job_type not in self.job_types:
            return False
        if self.categories is not None and job.category not in self.categories:
            return False
        if self.work_modes is not None and job.work_mode not in self.work_modes:
            return False

        return True


def _non_empty(values: Iterable) -> Optional[FrozenSet]:
    values = frozenset(values)
    return values or None


def build_criteria(user: UserProfile) -> RecommendationCriteria:
    """Derive recommendation criteria from a profile snapshot."""
    preferences = user.job_preferences

    return RecommendationCriteria(
        skills=_non_empty(user.skills),
        experience_levels=EXPERIENCE_LEVEL_MAP.get(user.experience),
        locations=_non_empty(
            location.strip().lower() for location in preferences.preferred_locations if location.strip()
        ),
        job_types=_non_empty(preferences.preferred_job_types),
        work_modes=_non_empty(preferences.preferred_work_modes),
        categories=_non_empty(preferences.preferred_categories),
    )


class RecommendationEngine:
    """Selects eligible jobs that fit a user's profile."""

    def __init__(self, catalog: JobCatalog):
        self.logger = logger.bind(component="recommendation_engine")
        self.catalog = catalog

    async def recommend(
        self,
        criteria: RecommendationCriteria,
        limit: int,
        exclude_ids: Iterable[str] = (),
    ) -> List[Job]:
        """
        Eligible jobs matching the criteria, featured first then newest.

        Args:
            criteria: Value produced by ``build_criteria``
            limit: Maximum number of jobs returned
            exclude_ids: Jobs never to recommend

        Returns:
            Matching jobs; empty when the criteria place no constraint
        """
        if criteria.is_empty() or limit <= 0:
            return []

        excluded = set(exclude_ids)
        jobs = await self.catalog.find_matching(
            lambda job: job.id not in excluded and criteria.matches(job),
            limit=limit,
        )

        self.logger.debug(
            "Recommendations computed",
            matched=len(jobs),
            limit=limit,
            has_skills=criteria.skills is not None,
            has_locations=criteria.locations is not None
        )
        return jobs

    async def recommend_for_user(
        self,
        user: UserProfile,
        limit: int,
        target: int,
        applied_job_ids: Iterable[str] = (),
    ) -> List[Job]:
        """
        Recommendations for a user, minus jobs already applied to.

        When fewer than ``target`` remain the list is topped up with the
        latest eligible jobs that are neither applied to nor already listed.
        """
        applied: Set[str] = set(applied_job_ids)

        jobs = await self.recommend(build_criteria(user), limit, exclude_ids=applied)
        recommended = len(jobs)

        if len(jobs) < target:
            listed = {job.id for job in jobs}
            jobs.extend(await self.catalog.latest(target - len(jobs), exclude_ids=applied | listed))

        self.logger.info(
            "Recommendations prepared",
            user_id=user.id,
            recommended=recommended,
            returned=len(jobs)
        )
        return jobs


def criteria_summary(criteria: RecommendationCriteria) -> Dict[str, List[str]]:
    """Sorted plain-value view of the criteria, for display."""
    summary: Dict[str, List[str]] = {}
    for name, values in criteria.model_dump().items():
        if values is not None:
            summary[name] = sorted(value.value if hasattr(value, "value") else value for value in values)
    return summary
