from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from jewellery.core.security import decode_token, JWTError
from jewellery.db.session import get_db
from jewellery.models.entities import User, UserRoles
from jewellery.models.schemas import ApiResponse

bearer = HTTPBearer(auto_error=False)

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated",
                            headers={"WWW-Authenticate": "Bearer"})
    try:
        payload = decode_token(credentials.credentials)
        uid = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token",
                            headers={"WWW-Authenticate": "Bearer"})
    user = db.get(User, uid)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user

def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRoles.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user

def envelope(response: ApiResponse, failure_status: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    """Render a service result: 200 on success, ``failure_status`` otherwise."""
    code = status.HTTP_200_OK if response.success else failure_status
    return JSONResponse(status_code=code, content=response.model_dump(mode="json", by_alias=True))
