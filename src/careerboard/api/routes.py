"""API routes for careerboard."""

import math
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from careerboard import __version__
from careerboard.api.models import (
    ApplicationListResponse, ApplicationSubmission, HealthCheck, JobDetailResponse,
    JobListResponse, NotesRequest, RecommendedJobsResponse, WithdrawRequest
)
from careerboard.core.errors import JobNotEligibleError, NotFoundError
from careerboard.core.models import (
    Application, ApplicationStatus, ExperienceLevel, Job, JobCategory, JobType,
    UserProfile, WorkMode
)
from careerboard.jobs.catalog import JOBS, FilterOptions, JobFilters
from careerboard.jobs.lifecycle import ApplicationFilters, UserApplicationStats
from careerboard.jobs.recommendation import build_criteria, criteria_summary
from careerboard.jobs.stats import DashboardSummary, PlatformStats
from careerboard.services import Services
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)

# Create routers
jobs_router = APIRouter(prefix="/jobs", tags=["jobs"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])
dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])
health_router = APIRouter(prefix="/health", tags=["health"])


def get_services(request: Request) -> Services:
    """Component graph attached to the application."""
    return request.app.state.services


def get_optional_user_id(request: Request, services: Services = Depends(get_services)) -> Optional[str]:
    """User id resolved upstream and forwarded in a header, if any."""
    user_id = request.headers.get(services.config.user_id_header)
    return user_id.strip() if user_id and user_id.strip() else None


def get_current_user_id(user_id: Optional[str] = Depends(get_optional_user_id)) -> str:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


async def get_current_profile(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
) -> UserProfile:
    try:
        return await services.profiles.get_profile(user_id)
    except NotFoundError:
        raise HTTPException(status_code=401, detail="Unknown user")


def _total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


# Jobs

@jobs_router.get("", response_model=JobListResponse)
async def list_jobs(
    search: Optional[str] = Query(None, description="Search terms"),
    location: Optional[str] = Query(None),
    category: Optional[JobCategory] = Query(None),
    job_type: Optional[JobType] = Query(None),
    work_mode: Optional[WorkMode] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    skills: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    services: Services = Depends(get_services)
):
    """Browse eligible jobs."""
    filters = JobFilters(
        search=search,
        location=location,
        category=category,
        job_type=job_type,
        work_mode=work_mode,
        experience_level=experience_level,
        salary_min=salary_min,
        salary_max=salary_max,
        skills=skills or []
    )
    page_size = services.config.jobs_page_size

    jobs = await services.catalog.find_eligible(filters, skip=(page - 1) * page_size, limit=page_size)
    total = await services.catalog.count_eligible(filters)

    return JobListResponse(
        jobs=jobs,
        total_count=total,
        page=page,
        total_pages=_total_pages(total, page_size)
    )


@jobs_router.get("/filters", response_model=FilterOptions)
async def get_filter_options(services: Services = Depends(get_services)):
    return await services.catalog.filter_options()


@jobs_router.get("/featured", response_model=List[Job])
async def get_featured_jobs(
    limit: int = Query(6, ge=1, le=50),
    services: Services = Depends(get_services)
):
    return await services.catalog.featured(limit)


@jobs_router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(services: Services = Depends(get_services)):
    return await services.stats.platform_stats()


@jobs_router.get("/recommended", response_model=RecommendedJobsResponse)
async def get_recommended_jobs(
    profile: UserProfile = Depends(get_current_profile),
    services: Services = Depends(get_services)
):
    """Jobs recommended for the current user, topped up with the latest jobs."""
    applied = await services.lifecycle.applied_job_ids(profile.id)
    jobs = await services.recommender.recommend_for_user(
        profile,
        limit=services.config.recommendation_limit,
        target=services.config.recommendation_target,
        applied_job_ids=applied
    )
    return RecommendedJobsResponse(jobs=jobs, criteria=criteria_summary(build_criteria(profile)))


@jobs_router.get("/category/{category}", response_model=JobListResponse)
async def get_jobs_by_category(
    category: str,
    page: int = Query(1, ge=1),
    services: Services = Depends(get_services)
):
    page_size = services.config.jobs_page_size
    jobs = await services.catalog.by_category(category, skip=(page - 1) * page_size, limit=page_size)
    total = len(await services.catalog.by_category(category))

    return JobListResponse(
        jobs=jobs,
        total_count=total,
        page=page,
        total_pages=_total_pages(total, page_size)
    )


@jobs_router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    services: Services = Depends(get_services)
):
    """Details of an open job; counts as a view."""
    try:
        job = await services.catalog.get_eligible_job(job_id)
    except JobNotEligibleError:
        raise NotFoundError("job", job_id)
    views = await services.catalog.increment_view_count(job_id)
    job = job.model_copy(update={"view_count": views})

    related = await services.catalog.related(job, limit=services.config.related_jobs_limit)
    has_applied = False
    if user_id is not None:
        has_applied = job_id in await services.lifecycle.applied_job_ids(user_id)

    return JobDetailResponse(job=job, related_jobs=related, has_applied=has_applied)


# Applications

@applications_router.post("", response_model=Application, status_code=201)
async def submit_application(
    submission: ApplicationSubmission,
    profile: UserProfile = Depends(get_current_profile),
    services: Services = Depends(get_services)
):
    """Apply to a job as the current user."""
    logger.info("Application submission received", job_id=submission.job_id, user_id=profile.id)

    return await services.lifecycle.create(
        submission.job_id,
        profile.id,
        submission.model_dump(exclude={"job_id"}),
        profile=profile
    )


@applications_router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: Optional[List[ApplicationStatus]] = Query(None),
    page: int = Query(1, ge=1),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    filters = ApplicationFilters(applicant_id=user_id, statuses=set(status) if status else None)
    return await _application_page(services, filters, page)


@applications_router.get("/follow-up", response_model=ApplicationListResponse)
async def list_follow_up_applications(
    page: int = Query(1, ge=1),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    """Open applications that have gone quiet."""
    filters = ApplicationFilters(applicant_id=user_id, needs_follow_up=True)
    return await _application_page(services, filters, page)


@applications_router.get("/stats", response_model=UserApplicationStats)
async def get_application_stats(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    return await services.stats.user_stats(user_id)


@applications_router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    return await services.lifecycle.get_for_applicant(application_id, user_id)


@applications_router.post("/{application_id}/withdraw", response_model=Application)
async def withdraw_application(
    application_id: str,
    request: WithdrawRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    return await services.lifecycle.withdraw(application_id, user_id, request.reason)


@applications_router.put("/{application_id}/notes", response_model=Application)
async def update_application_notes(
    application_id: str,
    request: NotesRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    return await services.lifecycle.add_personal_note(application_id, user_id, request.text)


@applications_router.post("/{application_id}/follow-up", response_model=Application)
async def follow_up_application(
    application_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services)
):
    return await services.lifecycle.record_follow_up(application_id, user_id)


async def _application_page(services: Services, filters: ApplicationFilters, page: int) -> ApplicationListResponse:
    page_size = services.config.applications_page_size
    applications = await services.lifecycle.list_with_filters(
        filters, skip=(page - 1) * page_size, limit=page_size
    )
    total = await services.lifecycle.count_with_filters(filters)

    return ApplicationListResponse(
        applications=applications,
        total_count=total,
        page=page,
        total_pages=_total_pages(total, page_size)
    )


# Dashboard

@dashboard_router.get("", response_model=DashboardSummary)
async def get_dashboard(
    profile: UserProfile = Depends(get_current_profile),
    services: Services = Depends(get_services)
):
    return await services.stats.dashboard(profile)


@health_router.get("", response_model=HealthCheck)
async def health_check(services: Services = Depends(get_services)):
    """Health check endpoint."""
    try:
        await services.store.count(JOBS)
        store_status = "healthy"
    except Exception as e:
        logger.error("Store health check failed", error=str(e))
        store_status = "unavailable"

    components = {"store": store_status}
    overall_status = "healthy" if all(status == "healthy" for status in components.values()) else "degraded"

    return HealthCheck(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        components=components
    )


# Export all routers
all_routers = [
    jobs_router,
    applications_router,
    dashboard_router,
    health_router
]
