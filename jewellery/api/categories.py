from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope
from jewellery.db.session import get_db
from jewellery.services.category_service import CategoryService

router = APIRouter()

@router.get("")
def list_categories(db: Session = Depends(get_db)):
    return envelope(CategoryService(db).get_all_categories())

@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    return envelope(CategoryService(db).get_category_by_id(category_id), failure_status=status.HTTP_404_NOT_FOUND)
