from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope, get_admin_user, get_current_user
from jewellery.db.session import get_db
from jewellery.models.entities import UserRoles
from jewellery.models.schemas import OrderStatusUpdateDto
from jewellery.services.order_service import OrderService

router = APIRouter()

@router.post("/checkout")
def checkout(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(OrderService(db).create_order_from_cart(user.id))

@router.get("")
def my_orders(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(OrderService(db).get_user_orders(user.id))

# declared before /{order_id}
@router.get("/all")
def all_orders(admin=Depends(get_admin_user), db: Session = Depends(get_db)):
    return envelope(OrderService(db).get_all_orders())

@router.get("/{order_id}")
def get_order(order_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    owner = None if user.role == UserRoles.ADMIN else user.id
    return envelope(OrderService(db).get_order_by_id(order_id, owner), failure_status=status.HTTP_404_NOT_FOUND)

@router.put("/{order_id}/status")
def update_status(order_id: int, payload: OrderStatusUpdateDto, admin=Depends(get_admin_user),
                  db: Session = Depends(get_db)):
    return envelope(OrderService(db).update_order_status(order_id, payload))
