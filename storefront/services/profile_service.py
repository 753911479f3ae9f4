from sqlalchemy.orm import Session

from storefront.data.models.profile import ProfileModel
from storefront.repos.profile_repo import ProfileRepo
from storefront.services.identity_service import Identity
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def default_display_name(email: str) -> str:
    return email.split("@", 1)[0] or "customer"


class ProfileService:
    def __init__(self, db: Session):
        self.repo = ProfileRepo(db)

    def ensure_profile(self, identity: Identity) -> ProfileModel:
        """Creates the profile the first time an identity shows up; later calls just return it."""
        existing = self.repo.get_profile(identity.id)
        if existing:
            return existing

        profile = ProfileModel(id=identity.id, display_name=default_display_name(identity.email))
        created = self.repo.create_profile(profile)
        logger.info(f"Created profile {created.id} ({created.display_name})")
        return created
