from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope, get_admin_user, get_current_user
from jewellery.db.session import get_db
from jewellery.services.user_service import UserService

router = APIRouter()

@router.get("/me")
def me(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(UserService(db).get_user_by_id(user.id), failure_status=status.HTTP_404_NOT_FOUND)

@router.get("")
def list_users(admin=Depends(get_admin_user), db: Session = Depends(get_db)):
    return envelope(UserService(db).get_all_users())
