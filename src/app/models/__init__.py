from .user import Profile, User, UserRole
from .category import Category
from .media_item import MediaItem
from .comment import Comment, CommentReport
from .feedback import Feedback
from .notification import Notification
from .ban_appeal import BanAppeal
from .email_verification import EmailVerificationCode
from .payment import Payment
