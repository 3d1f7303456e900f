"""Wiring of the careerboard components around one store and clock."""

from dataclasses import dataclass
from typing import Optional

from careerboard.config import Settings, settings as default_settings
from careerboard.core.clock import Clock, utc_now
from careerboard.jobs.catalog import JobCatalog
from careerboard.jobs.lifecycle import ApplicationLifecycleManager
from careerboard.jobs.recommendation import RecommendationEngine
from careerboard.jobs.stats import StatisticsAggregator
from careerboard.profiles import ProfileDirectory
from careerboard.store.base import DocumentStore
from careerboard.store.memory import InMemoryDocumentStore
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    """The component graph shared by the API and scripts."""
    store: DocumentStore
    config: Settings
    profiles: ProfileDirectory
    catalog: JobCatalog
    lifecycle: ApplicationLifecycleManager
    recommender: RecommendationEngine
    stats: StatisticsAggregator


def create_services(
    store: Optional[DocumentStore] = None,
    clock: Clock = utc_now,
    config: Optional[Settings] = None,
) -> Services:
    """
    Build the component graph.

    Args:
        store: Document store; an in-memory store when omitted
        clock: Time source shared by every component
        config: Settings; the module-level settings when omitted

    Returns:
        Wired services
    """
    store = store if store is not None else InMemoryDocumentStore()
    config = config or default_settings

    catalog = JobCatalog(store, clock=clock)
    lifecycle = ApplicationLifecycleManager(store, catalog, clock=clock, config=config)
    recommender = RecommendationEngine(catalog)

    logger.debug("Services created", store=type(store).__name__)

    return Services(
        store=store,
        config=config,
        profiles=ProfileDirectory(store),
        catalog=catalog,
        lifecycle=lifecycle,
        recommender=recommender,
        stats=StatisticsAggregator(catalog, lifecycle, recommender, config=config),
    )
