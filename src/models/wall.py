"""Class wall database models: posts, comments and mutes."""

import uuid

from sqlalchemy import Boolean, Column, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class WallPostModel(Base):
    __tablename__ = "wall_posts"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    author_id = Column(String, index=True, nullable=False)
    author_name = Column(String, nullable=True)
    author_is_teacher = Column(Boolean, nullable=False, default=False)
    content = Column(Text, nullable=False)
    link = Column(String, nullable=True)
    file_url = Column(String, nullable=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    comments = relationship(
        "WallPostCommentModel",
        back_populates="post",
        cascade="all, delete-orphan",
    )


class WallPostCommentModel(Base):
    __tablename__ = "wall_post_comments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(
        String, ForeignKey("wall_posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    author_id = Column(String, index=True, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    post = relationship("WallPostModel", back_populates="comments")


class MutedStudentModel(Base):
    __tablename__ = "muted_students"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_muted_students_class_student"),
    )

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    student_id = Column(String, index=True, nullable=False)
    muted_by = Column(String, nullable=False)
    muted_until = Column(String, nullable=True)  # None = indefinite
    created_at = Column(String, nullable=False, default=utc_now_iso)
