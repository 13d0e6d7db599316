import logging
from typing import Any, Dict

from errors import ProfileError
from models import UserProfile, editable_updates

logger = logging.getLogger(__name__)

PROFILES_TABLE = "user_profiles"


class ProfileService:
    """Reads and writes the signed-in user's profile row and account details."""

    def __init__(self, client):
        self.client = client

    def get_profile(self, user_id: str) -> UserProfile:
        try:
            rows = (
                self.client.table(PROFILES_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
                .data
            )
        except Exception as e:
            logger.error("Error fetching profile: %s", e)
            raise ProfileError("Failed to fetch profile") from e

        if not rows:
            return self.create_profile(user_id)
        return UserProfile.from_row(rows[0])

    def create_profile(self, user_id: str) -> UserProfile:
        try:
            rows = self.client.table(PROFILES_TABLE).insert(UserProfile.blank_row(user_id)).execute().data
        except Exception as e:
            logger.error("Error creating profile: %s", e)
            raise ProfileError("Failed to create profile") from e

        if not rows:
            logger.error("Error creating profile: insert returned no row for %s", user_id)
            raise ProfileError("Failed to create profile")
        logger.info("Created profile for %s", user_id)
        return UserProfile.from_row(rows[0])

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> UserProfile:
        changes = editable_updates(updates)
        if not changes:
            return self.get_profile(user_id)

        try:
            rows = (
                self.client.table(PROFILES_TABLE)
                .update(changes)
                .eq("user_id", user_id)
                .execute()
                .data
            )
        except Exception as e:
            logger.error("Error updating profile: %s", e)
            raise ProfileError("Failed to update profile") from e

        if not rows:
            logger.error("Error updating profile: no row for %s", user_id)
            raise ProfileError("Failed to update profile")
        return UserProfile.from_row(rows[0])

    def update_email(self, new_email: str) -> None:
        try:
            self.client.auth.update_user({"email": new_email})
        except Exception as e:
            logger.error("Error updating email: %s", e)
            raise ProfileError("Failed to update email") from e

    def update_password(self, new_password: str) -> None:
        try:
            self.client.auth.update_user({"password": new_password})
        except Exception as e:
            logger.error("Error updating password: %s", e)
            raise ProfileError("Failed to update password") from e
