from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewellery.api.deps import envelope, get_admin_user
from jewellery.db.session import get_db
from jewellery.services.dashboard_service import DashboardService

router = APIRouter()

@router.get("/stats")
def stats(admin=Depends(get_admin_user), db: Session = Depends(get_db)):
    return envelope(DashboardService(db).get_stats())
