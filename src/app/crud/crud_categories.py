from fastcrud import FastCRUD

from ..models.category import Category
from ..schemas.category import CategoryCreateInternal, CategoryRead, CategoryUpdate

CRUDCategory = FastCRUD[Category, CategoryCreateInternal, CategoryUpdate, CategoryUpdate, CategoryUpdate, CategoryRead]
crud_categories = CRUDCategory(Category)
