"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Managers get a request-scoped DB session; the mailer is a process-wide
singleton built from configuration at first use.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

import config
from core.database import get_db
from utils import assignment_manager
from utils import class_manager
from utils import invitation_manager
from utils import mail
from utils import notification_service
from utils import overdue_scanner
from utils import user_manager
from utils import wall_manager

# Singleton for Mailer (settings resolved once)
_mailer_instance: mail.Mailer = None


def get_mailer() -> mail.Mailer:
    """Get Mailer singleton instance.

    Returns:
        Mailer instance (singleton).
    """
    global _mailer_instance
    if _mailer_instance is None:
        _mailer_instance = mail.Mailer(config.get_smtp_settings())
    return _mailer_instance


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_class_manager(db: Session = Depends(get_db)) -> class_manager.ClassManager:
    """Get ClassManager instance with request-scoped DB session."""
    return class_manager.ClassManager(db)


def get_assignment_manager(
    db: Session = Depends(get_db),
) -> assignment_manager.AssignmentManager:
    """Get AssignmentManager instance with request-scoped DB session."""
    return assignment_manager.AssignmentManager(db)


def get_invitation_manager(
    db: Session = Depends(get_db),
) -> invitation_manager.InvitationManager:
    """Get InvitationManager instance with request-scoped DB session."""
    return invitation_manager.InvitationManager(db)


def get_wall_manager(db: Session = Depends(get_db)) -> wall_manager.WallManager:
    """Get WallManager instance with request-scoped DB session."""
    return wall_manager.WallManager(db)


def get_notification_service(
    assignments: assignment_manager.AssignmentManager = Depends(get_assignment_manager),
    users: user_manager.UserManager = Depends(get_user_manager),
    mailer: mail.Mailer = Depends(get_mailer),
) -> notification_service.NotificationService:
    """Get NotificationService wired to the request's managers and the mailer."""
    return notification_service.NotificationService(assignments, users, mailer)


def get_overdue_scanner(
    assignments: assignment_manager.AssignmentManager = Depends(get_assignment_manager),
    users: user_manager.UserManager = Depends(get_user_manager),
    mailer: mail.Mailer = Depends(get_mailer),
) -> overdue_scanner.OverdueScanner:
    """Get OverdueScanner with the configured look-back window."""
    return overdue_scanner.OverdueScanner(
        assignments, users, mailer, lookback_days=config.OVERDUE_LOOKBACK_DAYS
    )


# Type aliases for dependency injection
MailerDep = Annotated[mail.Mailer, Depends(get_mailer)]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
ClassManagerDep = Annotated[
    class_manager.ClassManager, Depends(get_class_manager)
]
AssignmentManagerDep = Annotated[
    assignment_manager.AssignmentManager, Depends(get_assignment_manager)
]
InvitationManagerDep = Annotated[
    invitation_manager.InvitationManager, Depends(get_invitation_manager)
]
WallManagerDep = Annotated[
    wall_manager.WallManager, Depends(get_wall_manager)
]
NotificationServiceDep = Annotated[
    notification_service.NotificationService, Depends(get_notification_service)
]
OverdueScannerDep = Annotated[
    overdue_scanner.OverdueScanner, Depends(get_overdue_scanner)
]
