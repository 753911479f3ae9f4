from sqlalchemy import Column, String

from storefront.data.database import Base


class ProfileModel(Base):
    __tablename__ = "profiles"

    # same id as the identity provider's user id
    id = Column(String, primary_key=True)
    display_name = Column(String, nullable=False)
