import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

import aiosmtplib
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.email_verification import EmailVerificationCode
from ...models.user import Profile
from ...schemas.verification import CodeSent
from ..config import EnvironmentOption, settings
from ..exceptions.http_exceptions import BadRequestException, CooldownException, EmailDeliveryException
from ..utils.cooldown import EmailCooldown
from ..utils.email import EmailSender, verification_email

logger = logging.getLogger(__name__)


def generate_code() -> str:
    return str(secrets.randbelow(900000) + 100000)


def hash_code(code: str) -> str:
    key = settings.SECRET_KEY.get_secret_value().encode()
    return hmac.new(key, code.encode(), hashlib.sha256).hexdigest()


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class VerificationService:
    """Issues and checks the six digit codes that confirm an email address."""

    def __init__(self, sender: EmailSender, cooldown: EmailCooldown, ttl_minutes: int | None = None):
        self.sender = sender
        self.cooldown = cooldown
        self.ttl = timedelta(minutes=ttl_minutes or settings.VERIFICATION_CODE_TTL_MINUTES)

    async def issue_code(self, db: AsyncSession, user_id: int, email: str, full_name: str | None = None) -> CodeSent:
        remaining = self.cooldown.remaining(email)
        if remaining:
            raise CooldownException(retry_after=remaining)

        code = generate_code()
        await db.execute(delete(EmailVerificationCode).where(EmailVerificationCode.user_id == user_id))
        db.add(
            EmailVerificationCode(
                user_id=user_id,
                code_hash=hash_code(code),
                expires_at=datetime.now(UTC) + self.ttl,
            )
        )
        await db.commit()

        if not self.sender.configured:
            self.cooldown.mark_sent(email)
            if settings.ENVIRONMENT == EnvironmentOption.LOCAL:
                logger.info("SMTP not configured, verification code for %s is %s", email, code)
                return CodeSent(message="Verification code created (email not configured)", dev_code=code)
            logger.warning("SMTP not configured, verification code for %s was not delivered", email)
            return CodeSent(message="Verification code created (email not configured)")

        subject, html = verification_email(code, full_name)
        try:
            await self.sender.send(to=email, subject=subject, html=html)
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send verification email to %s: %s", email, exc)
            raise EmailDeliveryException("Failed to send verification email") from exc

        self.cooldown.mark_sent(email)
        return CodeSent(message="Verification code sent")

    async def verify_code(self, db: AsyncSession, user_id: int, code: str) -> None:
        result = await db.execute(
            select(EmailVerificationCode).where(
                EmailVerificationCode.user_id == user_id,
                EmailVerificationCode.code_hash == hash_code(code),
            )
        )
        row = result.scalar_one_or_none()
        if row is None or not hmac.compare_digest(row.code_hash, hash_code(code)):
            raise BadRequestException("Invalid verification code")

        if as_utc(row.expires_at) <= datetime.now(UTC):
            await db.delete(row)
            await db.commit()
            raise BadRequestException("Verification code has expired")

        profile = (await db.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one()
        profile.email_verified = True
        profile.updated_at = datetime.now(UTC)
        await db.execute(delete(EmailVerificationCode).where(EmailVerificationCode.user_id == user_id))
        await db.commit()
        logger.info("Email verified for user %s", user_id)


async def purge_expired_codes(db: AsyncSession) -> int:
    result = await db.execute(delete(EmailVerificationCode).where(EmailVerificationCode.expires_at < datetime.now(UTC)))
    await db.commit()
    return result.rowcount or 0
