"""Notification mail templates.

Each notification kind has a plain-text and an HTML Jinja2 template; the HTML
variant is autoescaped.
"""

from enum import Enum
from typing import Optional

import jinja2

from utils.mail import MailMessage, SmtpSettings, format_address
from utils.timeutils import parse_timestamp


class NotificationKind(str, Enum):
    ASSIGNMENT_CREATED = "assignment_created"
    ASSIGNMENT_OVERDUE = "assignment_overdue"
    SUBMISSION_RECEIVED = "submission_received"


_TEMPLATES = {
    "assignment_created.subject": "Yeni Ödev: {{ assignment.title }}",
    "assignment_created.txt": (
        '{{ teacher.full_name }} öğretmeni "{{ assignment.title }}" ödevini tanımladı. '
        "Son teslim tarihi: {{ due_date }}"
        "{% if assignment.description %}\n\nAçıklama: {{ assignment.description }}{% endif %}"
    ),
    "assignment_created.html": """
<h2>Yeni Ödev Bildirimi</h2>
<p><strong>{{ teacher.full_name }}</strong> öğretmeni <strong>"{{ assignment.title }}"</strong> adlı yeni bir ödev tanımladı.</p>
<p>Son teslim tarihi: <strong>{{ due_date }}</strong></p>
{% if assignment.description %}<p>Açıklama: {{ assignment.description }}</p>{% endif %}
<p>Ödevi zamanında teslim etmeyi unutmayınız.</p>
""",
    "assignment_overdue.subject": "Gecikmiş Ödev Hatırlatması: {{ assignment.title }}",
    "assignment_overdue.txt": (
        "{{ assignment.title }} adlı ödevin teslim tarihi geçti ve henüz teslim etmediniz."
    ),
    "assignment_overdue.html": """
<h2>Gecikmiş Ödev Hatırlatması</h2>
<p><strong>"{{ assignment.title }}"</strong> adlı ödevin teslim tarihi geçti ve henüz teslim etmediniz.</p>
<p>Lütfen en kısa sürede ödevinizi teslim ediniz.</p>
""",
    "submission_received.subject": "Ödev Teslimi: {{ assignment.title }}",
    "submission_received.txt": (
        '{{ student.name }} adlı öğrenci "{{ assignment.title }}" ödevini teslim etti.'
    ),
    "submission_received.html": """
<h2>Ödev Teslim Bildirimi</h2>
<p><strong>{{ student.name }}</strong> adlı öğrenci <strong>"{{ assignment.title }}"</strong> adlı ödevi teslim etti.</p>
<p>Değerlendirmek için ödev sistemine giriş yapabilirsiniz.</p>
""",
}

_env = jinja2.Environment(
    loader=jinja2.DictLoader(_TEMPLATES),
    autoescape=jinja2.select_autoescape(enabled_extensions=("html",), default=False),
    undefined=jinja2.StrictUndefined,
)


def format_due_date(due_date: Optional[str]) -> str:
    parsed = parse_timestamp(due_date)
    if parsed is None:
        return "Belirtilmemiş"
    return parsed.strftime("%d.%m.%Y")


def _sender_for(kind: NotificationKind, teacher, settings: SmtpSettings) -> str:
    if kind == NotificationKind.SUBMISSION_RECEIVED:
        return settings.system_sender
    return format_address(teacher.full_name, teacher.email or settings.username)


def render(kind: NotificationKind, **context) -> tuple:
    """Render subject, text and HTML for a notification kind.

    Returns:
        Tuple of (subject, text, html).
    """
    prefix = kind.value
    subject = _env.get_template(f"{prefix}.subject").render(**context)
    text = _env.get_template(f"{prefix}.txt").render(**context)
    html = _env.get_template(f"{prefix}.html").render(**context).strip()
    return subject, text, html


def build_message(
    kind: NotificationKind,
    teacher,
    assignment,
    to: str,
    settings: SmtpSettings,
    student=None,
) -> MailMessage:
    """Build the message for one recipient.

    Args:
        kind: Which notification to send.
        teacher: Teacher owning the assignment (full_name, email).
        assignment: Assignment the notification is about.
        to: Recipient address.
        settings: SMTP settings, used for the fallback and system sender.
        student: The student concerned; needed for submission receipts.

    Returns:
        MailMessage ready for ``Mailer.send_mail``.
    """
    subject, text, html = render(
        kind,
        teacher=teacher,
        assignment=assignment,
        student=student,
        due_date=format_due_date(assignment.due_date),
    )
    return MailMessage(
        sender=_sender_for(kind, teacher, settings),
        to=to,
        subject=subject,
        text=text,
        html=html,
    )
