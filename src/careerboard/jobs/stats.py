"""Per-user and platform-wide statistics, plus the job seeker dashboard."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from careerboard.config import Settings, settings as default_settings
from careerboard.core.models import Application, ApplicationStatus, Job, UserProfile
from careerboard.jobs.catalog import CategoryCount, JobCatalog
from careerboard.jobs.lifecycle import (
    ApplicationFilters,
    ApplicationLifecycleManager,
    UserApplicationStats,
)
from careerboard.jobs.recommendation import RecommendationEngine
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_APPLICATIONS_LIMIT = 5
UPCOMING_INTERVIEWS_LIMIT = 3
ACTIVITY_SUBMISSIONS_LIMIT = 3
ACTIVITY_UPDATES_LIMIT = 3
ACTIVITY_FEED_LIMIT = 8


class PlatformStats(BaseModel):
    """Headline numbers for the landing page."""
    total_jobs: int = Field(0, ge=0, description="Eligible jobs")
    total_companies: int = Field(0, ge=0, description="Distinct companies with eligible jobs")
    total_applications: int = Field(0, ge=0, description="Applications ever submitted")
    top_categories: List[CategoryCount] = Field(default_factory=list, description="Largest categories")


class ActivityType(str, Enum):
    """Kind of entry in the activity feed."""
    APPLIED = "applied"
    STATUS_CHANGED = "status_changed"


class ActivityItem(BaseModel):
    """One entry of the dashboard activity feed."""
    type: ActivityType
    application_id: str
    job_id: str
    status: ApplicationStatus
    timestamp: datetime
    notes: Optional[str] = None


class DashboardSummary(BaseModel):
    """Everything the job seeker dashboard shows."""
    stats: UserApplicationStats
    recent_applications: List[Application] = Field(default_factory=list)
    follow_up_count: int = Field(0, ge=0, description="Applications needing a follow-up")
    upcoming_interviews: List[Application] = Field(default_factory=list)
    activity: List[ActivityItem] = Field(default_factory=list)
    recommended_jobs: List[Job] = Field(default_factory=list)


def build_activity_feed(
    recent_submissions: List[Application],
    recently_updated: List[Application],
    limit: int = ACTIVITY_FEED_LIMIT,
) -> List[ActivityItem]:
    """Merge submissions and latest status changes, newest first."""
    items: List[ActivityItem] = []

    for application in recent_submissions:
        items.append(ActivityItem(
            type=ActivityType.APPLIED,
            application_id=application.id,
            job_id=application.job_id,
            status=ApplicationStatus.SUBMITTED,
            timestamp=application.created_at,
        ))

    for application in recently_updated:
        change = application.latest_change
        if change is None or change.status == ApplicationStatus.SUBMITTED:
            continue
        items.append(ActivityItem(
            type=ActivityType.STATUS_CHANGED,
            application_id=application.id,
            job_id=application.job_id,
            status=change.status,
            timestamp=change.changed_at,
            notes=change.notes,
        ))

    items.sort(key=lambda item: item.timestamp, reverse=True)
    return items[:limit]


class StatisticsAggregator:
    """Read-only aggregates over jobs and applications."""

    def __init__(
        self,
        catalog: JobCatalog,
        lifecycle: ApplicationLifecycleManager,
        recommender: RecommendationEngine,
        config: Optional[Settings] = None,
    ):
        self.logger = logger.bind(component="statistics")
        self.catalog = catalog
        self.lifecycle = lifecycle
        self.recommender = recommender
        self.config = config or default_settings

    async def user_stats(self, applicant_id: str) -> UserApplicationStats:
        return await self.lifecycle.compute_user_stats(applicant_id)

    async def platform_stats(self) -> PlatformStats:
        summary = await self.catalog.summary()
        total_applications = await self.lifecycle.count_with_filters()
        top_categories = await self.catalog.category_counts(limit=self.config.top_categories_limit)

        return PlatformStats(
            total_jobs=summary["total_jobs"],
            total_companies=summary["total_companies"],
            total_applications=total_applications,
            top_categories=top_categories,
        )

    async def dashboard(self, user: UserProfile) -> DashboardSummary:
        """
        Assemble the job seeker dashboard.

        Args:
            user: Profile of the signed-in job seeker

        Returns:
            Stats, recent applications, follow-ups, interviews, activity and recommendations
        """
        mine = ApplicationFilters(applicant_id=user.id)

        stats = await self.lifecycle.compute_user_stats(user.id)
        recent = await self.lifecycle.list_with_filters(mine, limit=RECENT_APPLICATIONS_LIMIT)
        follow_up_count = await self.lifecycle.count_needing_follow_up(user.id)
        interviews = await self.lifecycle.upcoming_interviews(user.id, UPCOMING_INTERVIEWS_LIMIT)

        activity = build_activity_feed(
            recent[:ACTIVITY_SUBMISSIONS_LIMIT],
            await self.lifecycle.recently_updated(user.id, ACTIVITY_UPDATES_LIMIT),
        )

        limit = self.config.dashboard_recommendation_limit
        applied = await self.lifecycle.applied_job_ids(user.id)
        recommended = await self.recommender.recommend_for_user(user, limit, target=0, applied_job_ids=applied)
        if not recommended:
            recommended = await self.catalog.latest(limit, exclude_ids=applied)

        self.logger.debug(
            "Dashboard assembled",
            user_id=user.id,
            total_applications=stats.total,
            follow_up_count=follow_up_count,
            recommended=len(recommended)
        )

        return DashboardSummary(
            stats=stats,
            recent_applications=recent,
            follow_up_count=follow_up_count,
            upcoming_interviews=interviews,
            activity=activity,
            recommended_jobs=recommended[:limit],
        )
