import logging
from typing import List

from sqlalchemy.orm import Session

from jewellery.db.repository import GenericRepository
from jewellery.models.entities import Category
from jewellery.models.schemas import ApiResponse, CategoryDto

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = ["Rings", "Necklaces", "Earrings", "Bracelets"]


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.categories = GenericRepository(Category, db)

    def get_all_categories(self) -> ApiResponse[List[CategoryDto]]:
        try:
            categories = [CategoryDto.model_validate(c) for c in self.categories.get_all()]
            return ApiResponse[List[CategoryDto]].success_response(categories)
        except Exception as e:
            logger.exception("Error retrieving categories")
            return ApiResponse[List[CategoryDto]].error_response("Error retrieving categories", [str(e)])

    def get_category_by_id(self, category_id: int) -> ApiResponse[CategoryDto]:
        try:
            category = self.categories.get_by_id(category_id)
            if category is None:
                return ApiResponse[CategoryDto].error_response("Category not found")
            return ApiResponse[CategoryDto].success_response(CategoryDto.model_validate(category))
        except Exception as e:
            logger.exception(f"Error retrieving category {category_id}")
            return ApiResponse[CategoryDto].error_response("Error retrieving category", [str(e)])

    def seed_default_categories(self) -> int:
        existing = {c.name for c in self.categories.get_all()}
        missing = [Category(name=name) for name in DEFAULT_CATEGORIES if name not in existing]
        if missing:
            self.categories.add_all(missing)
            logger.info(f"Seeded {len(missing)} categories")
        return len(missing)
