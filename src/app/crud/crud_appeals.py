from fastcrud import FastCRUD

from ..models.ban_appeal import BanAppeal
from ..schemas.appeal import AppealCreate, AppealEdit, AppealRead, AppealReview

CRUDBanAppeal = FastCRUD[BanAppeal, AppealCreate, AppealEdit, AppealReview, AppealEdit, AppealRead]
crud_appeals = CRUDBanAppeal(BanAppeal)
