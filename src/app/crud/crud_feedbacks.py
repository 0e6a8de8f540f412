from fastcrud import FastCRUD

from ..models.feedback import Feedback
from ..schemas.feedback import FeedbackCreateInternal, FeedbackRead, FeedbackUpdate, FeedbackUpdateInternal

CRUDFeedback = FastCRUD[Feedback, FeedbackCreateInternal, FeedbackUpdate, FeedbackUpdateInternal, FeedbackUpdate, FeedbackRead]
crud_feedbacks = CRUDFeedback(Feedback)
