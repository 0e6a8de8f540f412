from fastcrud import FastCRUD

from ..models.comment import CommentReport
from ..schemas.comment import ReportCreate, ReportRead, ReportReview

CRUDCommentReport = FastCRUD[CommentReport, ReportCreate, ReportReview, ReportReview, ReportReview, ReportRead]
crud_reports = CRUDCommentReport(CommentReport)
