"""Job catalog, application lifecycle, recommendations and statistics."""

from .catalog import (
    CategoryCount,
    FilterOptions,
    JobCatalog,
    JobFilters
)
from .lifecycle import (
    ApplicationFilters,
    ApplicationLifecycleManager,
    UserApplicationStats,
    needs_follow_up
)
from .recommendation import (
    EXPERIENCE_LEVEL_MAP,
    RecommendationCriteria,
    RecommendationEngine,
    build_criteria
)
from .stats import (
    ActivityItem,
    DashboardSummary,
    PlatformStats,
    StatisticsAggregator
)
from .transitions import (
    LifecycleAction,
    Transition,
    TRANSITIONS
)

__all__ = [
    "CategoryCount",
    "FilterOptions",
    "JobCatalog",
    "JobFilters",
    "ApplicationFilters",
    "ApplicationLifecycleManager",
    "UserApplicationStats",
    "needs_follow_up",
    "EXPERIENCE_LEVEL_MAP",
    "RecommendationCriteria",
    "RecommendationEngine",
    "build_criteria",
    "ActivityItem",
    "DashboardSummary",
    "PlatformStats",
    "StatisticsAggregator",
    "LifecycleAction",
    "Transition",
    "TRANSITIONS"
]
