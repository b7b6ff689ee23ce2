"""Teacher database model."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class TeacherModel(Base):
    """Teacher profile. The id equals the auth platform user id."""

    __tablename__ = "teachers"

    id = Column(String, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    classes = relationship("ClassModel", back_populates="teacher")
