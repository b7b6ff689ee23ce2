"""Student database model."""

from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class StudentModel(Base):
    """Student profile. The id equals the auth platform user id."""

    __tablename__ = "students"

    id = Column(String, primary_key=True, index=True)
    class_id = Column(
        String, ForeignKey("classes.id", ondelete="SET NULL"), index=True, nullable=True
    )
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    class_ = relationship("ClassModel", back_populates="students")
