"""Profile directory: resolves opaque user ids to job seeker profiles."""

from typing import Optional

from careerboard.core.errors import NotFoundError
from careerboard.core.models import UserProfile, to_document
from careerboard.store.base import DocumentStore
from careerboard.utils.logging import get_logger

logger = get_logger(__name__)

USERS = "users"


class ProfileDirectory:
    """Read access to user profiles, plus registration for seeding and tests."""

    def __init__(self, store: DocumentStore):
        self.logger = logger.bind(component="profile_directory")
        self.store = store
        self.store.create_index(USERS, ["email"], unique=True)

    async def find_profile(self, user_id: str) -> Optional[UserProfile]:
        document = await self.store.get(USERS, user_id)
        return UserProfile.model_validate(document) if document is not None else None

    async def get_profile(self, user_id: str) -> UserProfile:
        profile = await self.find_profile(user_id)
        if profile is None:
            raise NotFoundError("user", user_id)
        return profile

    async def add_profile(self, profile: UserProfile) -> UserProfile:
        await self.store.insert(USERS, to_document(profile))
        self.logger.info("Profile registered", user_id=profile.id)
        return profile
