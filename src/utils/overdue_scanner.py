"""Overdue assignment reminders.

Meant to be triggered once a day by an external scheduler. For every
assignment whose due date fell in the scan window, students of the class who
have not submitted get a reminder. Running twice on the same day reminds the
remaining non-submitters again.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.assignment_manager import AssignmentManager
from utils.mail_templates import NotificationKind
from utils.notifier import notify_recipients
from utils.timeutils import day_window, utc_isoformat, utc_now
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

STATUS_FULLY_SUBMITTED = "fully_submitted"
STATUS_NO_EMAIL = "no_email_addresses"
STATUS_NOTIFIED = "notified"


@dataclass
class OverdueRunSummary:
    window_start: datetime
    window_end: datetime
    total_assignments: int = 0
    total_email_reminded: int = 0
    total_failed: int = 0
    processed_assignments: List[Dict[str, Any]] = field(default_factory=list)
    skipped_assignments: List[Dict[str, Any]] = field(default_factory=list)

    def skip(self, assignment, reason: str) -> None:
        logger.error(
            "Skipping assignment %s ('%s'): %s",
            getattr(assignment, "id", None),
            getattr(assignment, "title", None),
            reason,
        )
        self.skipped_assignments.append(
            {
                "id": getattr(assignment, "id", None),
                "title": getattr(assignment, "title", None) or "Bilinmeyen ödev",
                "error": reason,
            }
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "totalAssignments": self.total_assignments,
                "totalEmailReminded": self.total_email_reminded,
                "totalFailed": self.total_failed,
                "windowStart": utc_isoformat(self.window_start),
                "windowEnd": utc_isoformat(self.window_end),
            },
            "processedAssignments": self.processed_assignments,
            "skippedAssignments": self.skipped_assignments,
        }


class OverdueScanner:
    """Finds assignments that just went overdue and reminds non-submitters."""

    def __init__(
        self,
        assignment_manager: AssignmentManager,
        user_manager: UserManager,
        mailer,
        lookback_days: int = 1,
    ):
        """Initialize OverdueScanner.

        Args:
            assignment_manager: Reads assignments, rosters and submissions.
            user_manager: Reads the owning teacher.
            mailer: Object with ``send_mail(message)`` and ``settings``.
            lookback_days: Whole UTC days before today to scan; 1 means
                assignments due yesterday.
        """
        self.assignments = assignment_manager
        self.users = user_manager
        self.mailer = mailer
        self.lookback_days = lookback_days

    def run(self, now: Optional[datetime] = None) -> OverdueRunSummary:
        """Scan the window and send reminders.

        Args:
            now: Current time; defaults to the wall clock.

        Returns:
            OverdueRunSummary for the run.
        """
        start, end = day_window(now or utc_now(), self.lookback_days)
        summary = OverdueRunSummary(window_start=start, window_end=end)
        logger.info(
            "Scanning assignments due in [%s, %s)",
            utc_isoformat(start),
            utc_isoformat(end),
        )

        overdue = self.assignments.list_due_between(start, end)
        summary.total_assignments = len(overdue)
        logger.info("Found %d overdue assignment(s)", len(overdue))

        for assignment in overdue:
            try:
                self._process(assignment, summary)
            except Exception as exc:
                self.assignments.db.rollback()
                summary.skip(assignment, str(exc))

        logger.info(
            "Overdue run finished: %d assignment(s), %d reminder(s) sent, %d failed",
            summary.total_assignments,
            summary.total_email_reminded,
            summary.total_failed,
        )
        return summary

    def _process(self, assignment, summary: OverdueRunSummary) -> None:
        logger.info("Processing assignment '%s' (%s)", assignment.title, assignment.id)
        if not assignment.id or not assignment.created_by or not assignment.class_id:
            summary.skip(assignment, "Eksik ödev bilgileri")
            return

        teacher = self.users.find_teacher(assignment.created_by)
        if teacher is None or not teacher.full_name:
            summary.skip(assignment, "Öğretmen bulunamadı")
            return

        students = self.assignments.list_students(assignment.class_id)
        submitted_ids = self.assignments.list_submitted_student_ids(assignment.id)
        to_notify = [s for s in students if s.id not in submitted_ids]

        if not to_notify:
            logger.info("All students submitted '%s'", assignment.title)
            summary.processed_assignments.append(
                {
                    "id": assignment.id,
                    "title": assignment.title,
                    "status": STATUS_FULLY_SUBMITTED,
                }
            )
            return

        result = notify_recipients(
            NotificationKind.ASSIGNMENT_OVERDUE,
            teacher=teacher,
            recipients=to_notify,
            assignment=assignment,
            mailer=self.mailer,
        )
        summary.total_email_reminded += result.success
        summary.total_failed += result.failed_count

        entry = {
            "id": assignment.id,
            "title": assignment.title,
            "status": STATUS_NOTIFIED,
            "total": result.total,
            **result.as_counts(),
        }
        if result.success == 0 and result.failed_count == 0:
            entry["status"] = STATUS_NO_EMAIL
        if result.failed:
            entry["failures"] = result.failure_details()
        summary.processed_assignments.append(entry)
