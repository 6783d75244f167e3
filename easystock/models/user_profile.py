"""User profile model."""
from sqlalchemy import Column, String

from easystock.database import Base
from easystock.entities import UserProfile, UserRole


class UserProfileRecord(Base):

    __tablename__ = 'user_profile'

    id = Column(String, primary_key=True)
    email = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    role = Column(String(16), nullable=False, default=UserRole.USER.value)

    def __repr__(self):
        return f"<UserProfileRecord(id='{self.id}', role='{self.role}')>"

    @classmethod
    def from_entity(cls, profile: UserProfile):
        record = cls(id=profile.id)
        record.update_from(profile)
        return record

    def update_from(self, profile: UserProfile):
        self.email = profile.email
        self.display_name = profile.display_name
        self.photo_url = profile.photo_url
        self.role = UserRole(profile.role or UserRole.USER).value

    def to_entity(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            photo_url=self.photo_url,
            role=UserRole(self.role),
        )
