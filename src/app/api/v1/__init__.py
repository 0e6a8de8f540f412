from fastapi import APIRouter

from .admin_users import router as admin_users_router
from .appeals import router as appeals_router
from .categories import router as categories_router
from .comments import router as comments_router
from .emails import router as emails_router
from .feedbacks import router as feedbacks_router
from .health import router as health_router
from .login import router as login_router
from .logout import router as logout_router
from .media_items import router as media_items_router
from .notifications import router as notifications_router
from .payments import router as payments_router
from .reports import router as reports_router
from .uploads import router as uploads_router
from .users import router as users_router
from .verification import router as verification_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(login_router)
router.include_router(logout_router)
router.include_router(users_router)
router.include_router(verification_router)
router.include_router(payments_router)
router.include_router(categories_router)
router.include_router(media_items_router)
router.include_router(comments_router)
router.include_router(reports_router)
router.include_router(appeals_router)
router.include_router(admin_users_router)
router.include_router(feedbacks_router)
router.include_router(notifications_router)
router.include_router(uploads_router)
router.include_router(emails_router)
