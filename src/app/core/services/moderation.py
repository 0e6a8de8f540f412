"""Moderation workflows shared by the comment, report, appeal and admin routers.

Every workflow commits its database changes before any email goes out, so a
mail failure never rolls back an admin decision.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.ban_appeal import APPEAL_APPROVED, APPEAL_PENDING, APPEAL_REJECTED, BanAppeal
from ...models.comment import Comment, CommentReport
from ...models.notification import (
    ACCOUNT_BANNED,
    APPEAL_REVIEWED,
    COMMENT_DELETED,
    COMMENT_HIDDEN,
    REPORT_REVIEWED,
)
from ...models.user import Profile
from ..exceptions.http_exceptions import NotFoundException
from ..utils.email import EmailSender, appeal_decision_email, ban_email, moderation_email, send_quietly
from .notifications import create_notification

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 140


def _excerpt(content: str) -> str:
    if len(content) <= EXCERPT_LENGTH:
        return content
    return content[:EXCERPT_LENGTH].rstrip() + "..."


async def get_profile(db: AsyncSession, user_id: int) -> Profile:
    profile = (await db.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()
    if profile is None:
        raise NotFoundException("User not found")
    return profile


def apply_ban(profile: Profile, banned: bool, reason: str | None = None) -> None:
    now = datetime.now(UTC)
    profile.is_banned = banned
    profile.banned_at = now if banned else None
    profile.ban_reason = reason if banned else None
    profile.updated_at = now


async def set_comment_hidden(
    db: AsyncSession, sender: EmailSender, comment: Comment, admin_id: int, hidden: bool, reason: str | None
) -> Comment:
    now = datetime.now(UTC)
    newly_hidden = hidden and not comment.is_hidden_by_admin
    if newly_hidden or not hidden:
        comment.hidden_at = now if hidden else None
        comment.hidden_by = admin_id if hidden else None
    comment.is_hidden_by_admin = hidden
    comment.hide_reason = reason if hidden else None
    comment.updated_at = now

    if newly_hidden:
        create_notification(
            db,
            user_id=comment.user_id,
            notification_type=COMMENT_HIDDEN,
            title="Your comment was hidden",
            message="A moderator hid one of your comments because it broke the community guidelines.",
            metadata={"comment_id": comment.id, "media_item_id": comment.media_item_id, "reason": reason},
        )
    await db.commit()
    logger.info("Comment %s %s by admin %s", comment.id, "hidden" if hidden else "unhidden", admin_id)

    if newly_hidden:
        author = await get_profile(db, comment.user_id)
        subject, html = moderation_email(reason, action="hidden", excerpt=_excerpt(comment.content))
        await send_quietly(sender, author.email, subject, html)
    return comment


async def delete_comment(
    db: AsyncSession, sender: EmailSender, comment: Comment, actor_id: int, reason: str | None = None
) -> None:
    author_id = comment.user_id
    by_moderator = author_id != actor_id
    excerpt = _excerpt(comment.content)

    await db.delete(comment)
    if by_moderator:
        create_notification(
            db,
            user_id=author_id,
            notification_type=COMMENT_DELETED,
            title="Your comment was removed",
            message="A moderator removed one of your comments because it broke the community guidelines.",
            metadata={"comment_id": comment.id, "media_item_id": comment.media_item_id, "reason": reason},
        )
    await db.commit()
    logger.info("Comment %s deleted by user %s", comment.id, actor_id)

    if by_moderator:
        author = await get_profile(db, author_id)
        subject, html = moderation_email(reason, action="deleted", excerpt=excerpt)
        await send_quietly(sender, author.email, subject, html)


async def _close_pending_appeals(db: AsyncSession, user_id: int, admin_id: int) -> None:
    now = datetime.now(UTC)
    result = await db.execute(
        select(BanAppeal).where(BanAppeal.user_id == user_id, BanAppeal.status == APPEAL_PENDING)
    )
    for appeal in result.scalars():
        appeal.status = APPEAL_APPROVED
        appeal.admin_notes = "Ban lifted by an administrator"
        appeal.reviewed_by = admin_id
        appeal.reviewed_at = now
        appeal.updated_at = now


async def toggle_ban(
    db: AsyncSession, sender: EmailSender, user_id: int, admin_id: int, reason: str | None
) -> Profile:
    profile = await get_profile(db, user_id)
    banned = not profile.is_banned
    apply_ban(profile, banned, reason)

    if banned:
        create_notification(
            db,
            user_id=user_id,
            notification_type=ACCOUNT_BANNED,
            title="Your account was banned",
            message="Your account has been banned. You can submit an appeal from the banned page.",
            metadata={"reason": reason},
        )
    else:
        await _close_pending_appeals(db, user_id, admin_id)
    await db.commit()
    logger.info("User %s %s", user_id, "banned" if banned else "unbanned")

    if banned:
        subject, html = ban_email(reason)
        await send_quietly(sender, profile.email, subject, html)
    return profile


async def review_report(
    db: AsyncSession, report: CommentReport, admin_id: int, status: str, admin_notes: str | None
) -> CommentReport:
    report.status = status
    report.admin_notes = admin_notes
    report.reviewed_by = admin_id
    report.reviewed_at = datetime.now(UTC)

    create_notification(
        db,
        user_id=report.reporter_id,
        notification_type=REPORT_REVIEWED,
        title="Your report was reviewed",
        message=f"A moderator marked your report as {status}. Thank you for helping keep the community calm.",
        metadata={"report_id": report.id, "comment_id": report.comment_id, "status": status},
    )
    await db.commit()
    return report


async def _notify_appeal_decision(db: AsyncSession, sender: EmailSender, appeal: BanAppeal) -> None:
    approved = appeal.status == APPEAL_APPROVED
    create_notification(
        db,
        user_id=appeal.user_id,
        notification_type=APPEAL_REVIEWED,
        title="Your appeal was " + ("approved" if approved else "rejected"),
        message=(
            "Your ban has been lifted. Welcome back."
            if approved
            else "Your appeal was reviewed and the ban remains in place."
        ),
        metadata={"appeal_id": appeal.id, "status": appeal.status, "admin_notes": appeal.admin_notes},
    )
    await db.commit()

    profile = await get_profile(db, appeal.user_id)
    subject, html = appeal_decision_email(approved, appeal.admin_notes)
    await send_quietly(sender, profile.email, subject, html)


async def decide_appeal(
    db: AsyncSession,
    sender: EmailSender,
    appeal: BanAppeal,
    admin_id: int,
    status: str,
    admin_notes: str | None,
    reban_on_reject: bool = False,
) -> BanAppeal:
    """Record a decision on an appeal and sync the ban flag with it.

    Approval always lifts the ban. Rejection keeps the ban, and re-applies it
    when ``reban_on_reject`` is set (editing an appeal that had been approved).
    """
    previous = appeal.status
    appeal.status = status
    appeal.admin_notes = admin_notes
    appeal.updated_at = datetime.now(UTC)

    if status == APPEAL_PENDING:
        appeal.reviewed_by = None
        appeal.reviewed_at = None
        await db.commit()
        return appeal

    appeal.reviewed_by = admin_id
    appeal.reviewed_at = datetime.now(UTC)

    profile = await get_profile(db, appeal.user_id)
    if status == APPEAL_APPROVED and profile.is_banned:
        apply_ban(profile, False)
    elif status == APPEAL_REJECTED and reban_on_reject and not profile.is_banned:
        apply_ban(profile, True, profile.ban_reason)

    logger.info("Appeal %s moved from %s to %s by admin %s", appeal.id, previous, status, admin_id)
    await _notify_appeal_decision(db, sender, appeal)
    return appeal


async def reopen_appeal(db: AsyncSession, appeal: BanAppeal) -> BanAppeal:
    appeal.status = APPEAL_PENDING
    appeal.admin_notes = None
    appeal.reviewed_by = None
    appeal.reviewed_at = None
    appeal.updated_at = datetime.now(UTC)
    await db.commit()
    return appeal
