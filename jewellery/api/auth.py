from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope
from jewellery.db.session import get_db
from jewellery.models.schemas import LoginDto, UserDto
from jewellery.services.user_service import UserService

router = APIRouter()

@router.post("/register")
def register(payload: UserDto, db: Session = Depends(get_db)):
    return envelope(UserService(db).register(payload))

@router.post("/login")
def login(payload: LoginDto, db: Session = Depends(get_db)):
    return envelope(UserService(db).login(payload), failure_status=status.HTTP_401_UNAUTHORIZED)

@router.get("/check-email")
def check_email(email: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return envelope(UserService(db).check_email_exists(email))
