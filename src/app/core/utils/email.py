import logging
from datetime import UTC, datetime
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib

from ...templates import render_email
from ..config import settings
from ..exceptions.http_exceptions import EmailNotConfiguredException

logger = logging.getLogger(__name__)

FEEDBACK_TYPE_LABELS = {
    "problem": "Problem Report",
    "result": "Result/Success",
    "suggestion": "Suggestion",
}


class EmailSender:
    """Thin SMTP client. One instance per process, built from settings."""

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool,
        default_from: str,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.default_from = default_from

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    async def send(self, to: str, subject: str, html: str, sender: str | None = None) -> str:
        if not self.configured:
            raise EmailNotConfiguredException()

        msg = EmailMessage()
        msg["From"] = sender or self.default_from
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid(domain=self.default_from.rsplit("@", 1)[-1].strip(">"))
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html, subtype="html")

        await aiosmtplib.send(
            msg,
            hostname=self.hostname,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=self.use_tls,
        )
        logger.info("Email sent to %s (%s)", to, subject)
        return msg["Message-ID"]


email_sender = EmailSender(
    hostname=settings.SMTP_HOST,
    port=settings.SMTP_PORT,
    username=settings.SMTP_USER,
    password=settings.SMTP_PASS.get_secret_value(),
    use_tls=settings.SMTP_USE_TLS,
    default_from=settings.SMTP_FROM,
)


def get_email_sender() -> EmailSender:
    return email_sender


async def send_quietly(sender: EmailSender, to: str, subject: str, html: str) -> bool:
    """Send a notification email after the database work is already committed.

    A mail outage must not undo a moderation decision, so failures are logged
    and reported through the return value.
    """
    if not sender.configured:
        logger.warning("SMTP not configured, skipping email to %s (%s)", to, subject)
        return False
    try:
        await sender.send(to=to, subject=subject, html=html)
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s (%s): %s", to, subject, exc)
        return False
    return True


def _year() -> int:
    return datetime.now(UTC).year


def verification_email(code: str, full_name: str | None) -> tuple[str, str]:
    subject = f"Verify your email - {settings.APP_NAME}"
    html = render_email(
        "verification_code.html",
        code=code,
        full_name=full_name,
        ttl_minutes=settings.VERIFICATION_CODE_TTL_MINUTES,
        year=_year(),
    )
    return subject, html


def ban_email(reason: str | None) -> tuple[str, str]:
    subject = f"Account Banned - {settings.APP_NAME}"
    return subject, render_email("account_banned.html", reason=reason, year=_year())


def moderation_email(reason: str | None, action: str = "hidden", excerpt: str | None = None) -> tuple[str, str]:
    subject = f"Your Comment Was Moderated - {settings.APP_NAME}"
    html = render_email("comment_moderated.html", reason=reason, action=action, excerpt=excerpt, year=_year())
    return subject, html


def appeal_decision_email(approved: bool, admin_notes: str | None) -> tuple[str, str]:
    verdict = "approved" if approved else "rejected"
    subject = f"Your appeal was {verdict} - {settings.APP_NAME}"
    html = render_email("appeal_decision.html", approved=approved, admin_notes=admin_notes, year=_year())
    return subject, html


def feedback_email(
    feedback_type: str, message: str, email: str | None, user_name: str | None, user_id: int | None
) -> tuple[str, str]:
    label = FEEDBACK_TYPE_LABELS[feedback_type]
    subject = f"{label} from {user_name or 'Anonymous'}"
    html = render_email(
        "feedback.html",
        type_label=label,
        message=message,
        email=email,
        user_name=user_name,
        user_id=user_id,
        sent_at=datetime.now(UTC).isoformat(),
    )
    return subject, html
