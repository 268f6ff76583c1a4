# picvote/crud.py
import logging
from typing import Optional, Tuple

from .models import Admin
from .security import hash_password, verify_password
from .storage import Store

logger = logging.getLogger(__name__)


# Create a new admin with hashed password
def create_admin(store: Store, name: str, email: str, password: str) -> Optional[Admin]:
    admin = store.create_admin(name, email.lower(), hash_password(password))
    if admin:
        logger.info(f"Admin {admin.email} created")
    return admin


# Login admin
def login_admin(store: Store, email: str, password: str) -> Tuple[Optional[Admin], Optional[str]]:
    admin = store.get_admin_by_email(email.lower())
    # Same message for both cases so the login form does not leak which emails exist
    if not admin:
        return None, "Invalid credentials"
    if not verify_password(password, admin.hashed_password):
        return None, "Invalid credentials"
    return admin, None
