# picvote/routes/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..database import get_store
from ..security import decode_access_token
from ..vote_service import VoteService

bearer_scheme = HTTPBearer(auto_error=False)


def get_service() -> VoteService:
    return VoteService(get_store())


def get_is_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> bool:
    """
    True when the request carries a valid admin token.

    Routes pass the flag on to VoteService, which decides whether the
    operation needs it.
    """
    if credentials is None:
        return False
    payload = decode_access_token(credentials.credentials)
    return bool(payload and payload.get("sub"))
