from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope, get_current_user
from jewellery.db.session import get_db
from jewellery.models.schemas import AddToCartDto, UpdateCartItemDto
from jewellery.services.cart_service import CartService

router = APIRouter()

@router.get("")
def get_cart(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(CartService(db).get_cart_by_user_id(user.id))

@router.post("/items")
def add_to_cart(item: AddToCartDto, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(CartService(db).add_to_cart(user.id, item.product_id, item.quantity))

@router.put("/items/{item_id}")
def update_item(item_id: int, payload: UpdateCartItemDto, user=Depends(get_current_user),
                db: Session = Depends(get_db)):
    return envelope(CartService(db).update_cart_item(user.id, item_id, payload.quantity))

@router.delete("/items/{item_id}")
def remove_item(item_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(CartService(db).remove_cart_item(user.id, item_id))

@router.delete("")
def clear_cart(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(CartService(db).clear_cart(user.id))
