from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope, get_admin_user
from jewellery.db.session import get_db
from jewellery.models.schemas import ProductCreateDto, ProductUpdateDto
from jewellery.services.product_service import ProductService

router = APIRouter()

@router.get("")
def list_products(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return envelope(ProductService(db).get_all_products(category_id=category_id, search=search))

@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return envelope(ProductService(db).get_product_by_id(product_id), failure_status=status.HTTP_404_NOT_FOUND)

@router.post("")
def create_product(payload: ProductCreateDto, admin=Depends(get_admin_user), db: Session = Depends(get_db)):
    return envelope(ProductService(db).create_product(payload))

@router.put("/{product_id}")
def update_product(product_id: int, payload: ProductUpdateDto, admin=Depends(get_admin_user),
                   db: Session = Depends(get_db)):
    return envelope(ProductService(db).update_product(product_id, payload))

@router.delete("/{product_id}")
def delete_product(product_id: int, admin=Depends(get_admin_user), db: Session = Depends(get_db)):
    return envelope(ProductService(db).delete_product(product_id))
