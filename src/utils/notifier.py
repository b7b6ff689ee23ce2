"""Per-recipient notification loop.

Sends the same notification to many recipients, one at a time, and records
the outcome of every recipient instead of stopping at the first failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from utils.mail_templates import NotificationKind, build_message

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch.

    ``succeeded + failed + skipped`` always covers every input recipient
    exactly once.
    """

    succeeded: List[Any] = field(default_factory=list)
    failed: List[Tuple[Any, Exception]] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)

    @property
    def success(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def total(self) -> int:
        return self.success + self.failed_count + self.skipped_count

    def as_counts(self) -> Dict[str, int]:
        return {
            "success": self.success,
            "failed": self.failed_count,
            "skipped": self.skipped_count,
        }

    def failure_details(self) -> List[Dict[str, str]]:
        return [
            {"id": recipient.id, "name": recipient.name, "error": str(error)}
            for recipient, error in self.failed
        ]


def notify_recipients(
    kind: NotificationKind,
    teacher,
    recipients: Sequence[Any],
    assignment,
    mailer,
) -> BatchResult:
    """Send one notification per recipient.

    Recipients without an email address are skipped without a send attempt.
    Every other recipient gets exactly one attempt, in input order; a failed
    send is recorded and the loop moves on.

    Args:
        kind: Template to use for every recipient.
        teacher: Teacher the notification is sent on behalf of.
        recipients: Students to notify (need ``id``, ``name``, ``email``).
        assignment: The assignment concerned.
        mailer: Object with ``send_mail(message)`` and ``settings``.

    Returns:
        BatchResult with the per-recipient outcome.
    """
    result = BatchResult()
    if not recipients:
        return result

    logger.info(
        "Sending %s notification for '%s' to %d recipient(s)",
        kind.value,
        assignment.title,
        len(recipients),
    )
    for recipient in recipients:
        if not recipient.email:
            logger.warning("%s has no email address, skipping", recipient.name)
            result.skipped.append(recipient)
            continue
        try:
            message = build_message(
                kind,
                teacher=teacher,
                assignment=assignment,
                to=recipient.email,
                settings=mailer.settings,
                student=recipient,
            )
            mailer.send_mail(message)
        except Exception as exc:
            logger.error(
                "Notification to %s <%s> failed: %s",
                recipient.name,
                recipient.email,
                exc,
            )
            result.failed.append((recipient, exc))
            continue
        result.succeeded.append(recipient)

    logger.info(
        "Batch finished for '%s': %d sent, %d failed, %d skipped",
        assignment.title,
        result.success,
        result.failed_count,
        result.skipped_count,
    )
    return result
