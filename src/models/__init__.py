"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .teacher import TeacherModel
from .student import StudentModel
from .class_model import ClassModel
from .class_invitation import ClassInvitationModel
from .assignment import AssignmentModel, StudentAssignmentModel
from .student_solution import StudentSolutionModel
from .wall import MutedStudentModel, WallPostCommentModel, WallPostModel

__all__ = [
    "Base",
    "TeacherModel",
    "StudentModel",
    "ClassModel",
    "ClassInvitationModel",
    "AssignmentModel",
    "StudentAssignmentModel",
    "StudentSolutionModel",
    "WallPostModel",
    "WallPostCommentModel",
    "MutedStudentModel",
]
