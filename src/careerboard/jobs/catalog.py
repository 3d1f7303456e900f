"""Job catalog: storage, eligibility and filtered queries over job postings."""

import re
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from careerboard.core.clock import Clock, utc_now
from careerboard.core.errors import JobNotEligibleError, NotFoundError, ValidationError
from careerboard.core.models import (
    ExperienceLevel,
    Job,
    JobCategory,
    JobStatus,
    JobType,
    WorkMode,
    to_document,
)
from careerboard.store.base import DESCENDING, Document, DocumentNotFoundError, DocumentStore
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)

JOBS = "jobs"

FEATURED_FIRST = [("featured", DESCENDING), ("created_at", DESCENDING)]
NEWEST_FIRST = [("created_at", DESCENDING)]

_WORD = re.compile(r"\w+")

JobPredicate = Callable[[Job], bool]


class JobFilters(BaseModel):
    """Optional, AND-combined filters for browsing eligible jobs."""
    search: Optional[str] = Field(None, description="Free-text search over title, description, skills and tags")
    location: Optional[str] = Field(None, description="Case-insensitive location substring")
    category: Optional[JobCategory] = Field(None, description="Exact category")
    job_type: Optional[JobType] = Field(None, description="Exact job type")
    work_mode: Optional[WorkMode] = Field(None, description="Exact work mode")
    experience_level: Optional[ExperienceLevel] = Field(None, description="Exact experience level")
    salary_min: Optional[float] = Field(None, ge=0, description="Salary floor; jobs whose minimum is at least this")
    salary_max: Optional[float] = Field(None, ge=0, description="Salary ceiling; jobs whose maximum is at most this")
    skills: List[str] = Field(default_factory=list, description="Jobs requiring any of these skills")


class FilterOptions(BaseModel):
    """Distinct values present among eligible jobs, for building filter forms."""
    categories: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    job_types: List[str] = Field(default_factory=list)
    work_modes: List[str] = Field(default_factory=list)


class CategoryCount(BaseModel):
    """Number of eligible jobs in a category."""
    category: JobCategory
    count: int


def _words(values: Iterable[str]) -> Set[str]:
    words: Set[str] = set()
    for value in values:
        words.update(_WORD.findall(value.lower()))
    return words


def _lower_set(values: Iterable[str]) -> Set[str]:
    return {value.strip().lower() for value in values if value and value.strip()}


def matches_search(job: Job, search: str) -> bool:
    """True if any search term appears as a word of the job's searchable text."""
    terms = set(_WORD.findall(search.lower()))
    if not terms:
        return True
    haystack = _words([job.title, job.description, *job.skills, *job.tags])
    return bool(terms & haystack)


def has_any_skill(job: Job, skills: Iterable[str]) -> bool:
    """Case-insensitive overlap between the job's skills and the given ones."""
    return bool(_lower_set(job.skills) & _lower_set(skills))


def matches_filters(job: Job, filters: JobFilters) -> bool:
    """Apply every present filter; absent filters always pass."""
    if filters.search and not matches_search(job, filters.search):
        return False

    if filters.location and filters.location.strip().lower() not in job.location.lower():
        return False

    if filters.category and job.category != filters.category:
        return False
    if filters.job_type and job.job_type != filters.job_type:
        return False
    if filters.work_mode and job.work_mode != filters.work_mode:
        return False
    if filters.experience_level and job.experience_level != filters.experience_level:
        return False

    if filters.salary_min is not None:
        if job.salary is None or job.salary.min is None or job.salary.min < filters.salary_min:
            return False
    if filters.salary_max is not None:
        if job.salary is None or job.salary.max is None or job.salary.max > filters.salary_max:
            return False

    if filters.skills and not has_any_skill(job, filters.skills):
        return False

    return True


class JobCatalog:
    """Stores job postings and answers eligibility-aware queries about them."""

    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        self.logger = logger.bind(component="job_catalog")
        self.store = store
        self.clock = clock

    def _eligible(self, extra: Optional[JobPredicate] = None) -> Callable[[Document], bool]:
        """Document predicate: status active, deadline not passed, plus ``extra``."""
        now = self.clock()

        def predicate(document: Document) -> bool:
            if document.get("status") != JobStatus.ACTIVE or document["application_deadline"] < now:
                return False
            return extra is None or extra(Job.model_validate(document))

        return predicate

    async def add_job(self, job: Job) -> Job:
        """
        Add a posting on behalf of an employer-side collaborator.

        Args:
            job: Posting to store; its deadline must be in the future

        Returns:
            The stored job with creation timestamps from the catalog clock
        """
        now = self.clock()
        if job.application_deadline <= now:
            raise ValidationError.single("application_deadline", "Application deadline must be in the future")

        job = job.model_copy(update={"created_at": now, "updated_at": now})
        await self.store.insert(JOBS, to_document(job))

        self.logger.info(
            "Job added",
            job_id=job.id,
            title=job.title,
            company=job.company,
            status=job.status.value
        )
        return job

    async def get_job(self, job_id: str) -> Job:
        document = await self.store.get(JOBS, job_id)
        if document is None:
            raise NotFoundError("job", job_id)
        return Job.model_validate(document)

    async def get_eligible_job(self, job_id: str) -> Job:
        """Fetch a job that is currently accepting applications."""
        job = await self.get_job(job_id)
        if job.status != JobStatus.ACTIVE:
            raise JobNotEligibleError(job_id, f"status is {job.status.value}")
        if not job.is_accepting_applications(self.clock()):
            raise JobNotEligibleError(job_id, "application deadline has passed")
        return job

    async def find_eligible(
        self,
        filters: Optional[JobFilters] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Job]:
        """Eligible jobs matching the filters, featured first then newest."""
        filters = filters or JobFilters()
        documents = await self.store.find(
            JOBS,
            where=self._eligible(lambda job: matches_filters(job, filters)),
            sort=FEATURED_FIRST,
            skip=skip,
            limit=limit,
        )
        return [Job.model_validate(document) for document in documents]

    async def count_eligible(self, filters: Optional[JobFilters] = None) -> int:
        filters = filters or JobFilters()
        return await self.store.count(JOBS, where=self._eligible(lambda job: matches_filters(job, filters)))

    async def find_matching(
        self,
        predicate: JobPredicate,
        limit: Optional[int] = None,
    ) -> List[Job]:
        """Eligible jobs satisfying an arbitrary predicate, featured first then newest."""
        documents = await self.store.find(
            JOBS, where=self._eligible(predicate), sort=FEATURED_FIRST, limit=limit
        )
        return [Job.model_validate(document) for document in documents]

    async def latest(self, limit: int, exclude_ids: Iterable[str] = ()) -> List[Job]:
        """Newest eligible jobs, skipping the given ids."""
        excluded = set(exclude_ids)
        documents = await self.store.find(
            JOBS,
            where=self._eligible(lambda job: job.id not in excluded),
            sort=NEWEST_FIRST,
            limit=limit,
        )
        return [Job.model_validate(document) for document in documents]

    async def featured(self, limit: int) -> List[Job]:
        documents = await self.store.find(
            JOBS, where=self._eligible(lambda job: job.featured), sort=NEWEST_FIRST, limit=limit
        )
        return [Job.model_validate(document) for document in documents]

    async def related(self, job: Job, limit: int = 4) -> List[Job]:
        """Other eligible jobs in the same category."""
        if limit <= 0:
            return []
        return await self.find_matching(
            lambda other: other.category == job.category and other.id != job.id,
            limit=limit,
        )

    async def by_category(self, category: str, skip: int = 0, limit: Optional[int] = None) -> List[Job]:
        """Eligible jobs whose category matches case-insensitively."""
        wanted = category.strip().lower()
        documents = await self.store.find(
            JOBS,
            where=self._eligible(lambda job: job.category.value.lower() == wanted),
            sort=FEATURED_FIRST,
            skip=skip,
            limit=limit,
        )
        return [Job.model_validate(document) for document in documents]

    async def distinct_eligible(self, field: str) -> List[Any]:
        values = await self.store.distinct(JOBS, field, where=self._eligible())
        return sorted(value.value if hasattr(value, "value") else value for value in values)

    async def filter_options(self) -> FilterOptions:
        return FilterOptions(
            categories=await self.distinct_eligible("category"),
            locations=await self.distinct_eligible("location"),
            job_types=await self.distinct_eligible("job_type"),
            work_modes=await self.distinct_eligible("work_mode"),
        )

    async def category_counts(self, limit: Optional[int] = None) -> List[CategoryCount]:
        """Eligible-job counts per category, largest first, ties by name."""
        documents = await self.store.find(JOBS, where=self._eligible())
        counter = Counter(JobCategory(document["category"]) for document in documents)
        ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0].value))
        if limit is not None:
            ranked = ranked[:limit]
        return [CategoryCount(category=category, count=count) for category, count in ranked]

    async def _increment(self, job_id: str, field: str) -> int:
        try:
            return await self.store.increment(JOBS, job_id, field, 1)
        except DocumentNotFoundError as e:
            raise NotFoundError("job", job_id) from e

    async def increment_view_count(self, job_id: str) -> int:
        return await self._increment(job_id, "view_count")

    async def increment_application_count(self, job_id: str) -> int:
        return await self._increment(job_id, "total_applications")

    async def summary(self) -> Dict[str, int]:
        """Eligible job and company counts."""
        return {
            "total_jobs": await self.count_eligible(),
            "total_companies": len(await self.distinct_eligible("company")),
        }
