from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import NotFoundException
from ...core.services import moderation
from ...crud.crud_reports import crud_reports
from ...models.comment import Comment, CommentReport
from ...models.user import Profile
from ...schemas.comment import ReportRead, ReportReview
from ..dependencies import get_current_admin

router = APIRouter(prefix="/admin/reports", tags=["reports"])

ReporterProfile = aliased(Profile)
AuthorProfile = aliased(Profile)


def _profile_view(profile: Profile | None) -> dict | None:
    if profile is None:
        return None
    return {"user_id": profile.user_id, "full_name": profile.full_name, "email": profile.email}


@router.get("", response_model=list[ReportRead], dependencies=[Depends(get_current_admin)])
async def read_reports(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    status: Literal["pending", "reviewed", "dismissed"] | None = None,
) -> list[dict]:
    stmt = (
        select(CommentReport, Comment, ReporterProfile, AuthorProfile)
        .join(Comment, Comment.id == CommentReport.comment_id)
        .outerjoin(ReporterProfile, ReporterProfile.user_id == CommentReport.reporter_id)
        .outerjoin(AuthorProfile, AuthorProfile.user_id == Comment.user_id)
        .order_by(CommentReport.created_at.desc(), CommentReport.id.desc())
    )
    if status is not None:
        stmt = stmt.where(CommentReport.status == status)

    reports = []
    for report, comment, reporter, author in (await db.execute(stmt)).all():
        reports.append(
            {
                "id": report.id,
                "comment_id": report.comment_id,
                "reporter_id": report.reporter_id,
                "reason": report.reason,
                "status": report.status,
                "admin_notes": report.admin_notes,
                "reviewed_by": report.reviewed_by,
                "reviewed_at": report.reviewed_at,
                "created_at": report.created_at,
                "reporter": _profile_view(reporter),
                "comment": {
                    "id": comment.id,
                    "media_item_id": comment.media_item_id,
                    "user_id": comment.user_id,
                    "content": comment.content,
                    "is_hidden_by_admin": comment.is_hidden_by_admin,
                    "author": _profile_view(author),
                },
            }
        )
    return reports


@router.patch("/{report_id}", response_model=ReportRead)
async def review_report(
    report_id: int,
    values: ReportReview,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    report = await db.get(CommentReport, report_id)
    if report is None:
        raise NotFoundException("Report not found")

    await moderation.review_report(db, report, current_user["id"], values.status, values.admin_notes)
    return await crud_reports.get(db=db, schema_to_select=ReportRead, id=report_id)


@router.delete("/{report_id}", dependencies=[Depends(get_current_admin)])
async def erase_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    if not await crud_reports.exists(db=db, id=report_id):
        raise NotFoundException("Report not found")
    await crud_reports.db_delete(db=db, id=report_id)
    return {"message": "Report deleted"}
