import logging
from typing import Annotated

import aiosmtplib
from fastapi import APIRouter, Depends

from ...core.exceptions.http_exceptions import EmailDeliveryException
from ...core.utils.email import EmailSender, ban_email, get_email_sender, moderation_email
from ...schemas.email import EmailSend, EmailSent, ModerationEmail
from ..dependencies import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/emails", tags=["emails"], dependencies=[Depends(get_current_admin)])


async def _deliver(sender: EmailSender, to: str, subject: str, html: str, from_: str | None = None) -> EmailSent:
    try:
        message_id = await sender.send(to=to, subject=subject, html=html, sender=from_)
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", to, exc)
        raise EmailDeliveryException(f"Failed to send email: {exc}") from exc
    return EmailSent(message_id=message_id)


@router.post("/send", response_model=EmailSent)
async def send_email(
    values: EmailSend,
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> EmailSent:
    return await _deliver(sender, values.to, values.subject, values.html, values.sender)


@router.post("/moderation", response_model=EmailSent)
async def send_moderation_email(
    values: ModerationEmail,
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> EmailSent:
    if values.type == "ban":
        subject, html = ban_email(values.reason)
    else:
        subject, html = moderation_email(values.reason)
    return await _deliver(sender, values.email, subject, html)
