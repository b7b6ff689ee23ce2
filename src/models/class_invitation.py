import uuid

from sqlalchemy import Boolean, Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class ClassInvitationModel(Base):
    __tablename__ = "class_invitations"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    invitation_code = Column(String, unique=True, index=True, nullable=False)
    created_by = Column(String, nullable=False)
    expires_at = Column(String, nullable=True)  # ISO format string, None = never
    is_active = Column(Boolean, nullable=False, default=True)
    max_uses = Column(Integer, nullable=True)  # None = unlimited
    current_uses = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    class_ = relationship("ClassModel", back_populates="invitations")
