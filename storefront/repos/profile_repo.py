from sqlalchemy.orm import Session
from storefront.data.models.profile import ProfileModel


class ProfileRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, profile_id: str) -> ProfileModel | None:
        return self.db.get(ProfileModel, profile_id)

    def create_profile(self, profile: ProfileModel) -> ProfileModel:
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def rollback(self):
        self.db.rollback()
