# picvote/routes/auth_routes.py
import logging

from fastapi import APIRouter, HTTPException

from ..crud import login_admin
from ..database import get_store
from ..schemas import AdminLogin, AdminOut, TokenOut
from ..security import create_access_token

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login", response_model=TokenOut)
def admin_login(credentials: AdminLogin):
    admin, error = login_admin(get_store(), credentials.email, credentials.password)
    if error:
        logger.warning(f"Failed admin login for {credentials.email}")
        raise HTTPException(status_code=400, detail=error)
    token = create_access_token({"sub": admin.id, "email": admin.email})
    return TokenOut(token=token, admin=AdminOut(id=admin.id, email=admin.email, name=admin.name))
