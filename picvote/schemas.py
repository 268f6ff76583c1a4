from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .models import Candidate


class VoteIn(BaseModel):
    image_id: str = ""
    name: str = ""
    nim: str = ""  # student ID


class VoteOut(BaseModel):
    message: str
    vote_id: str
    image_id: str


class ImagesOut(BaseModel):
    images: List[Candidate]
    is_voting_open: bool
    deadline: Optional[datetime] = None


class AdminLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminOut(BaseModel):
    id: str
    email: str
    name: str


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    admin: AdminOut


class SettingsIn(BaseModel):
    # null clears the deadline and leaves voting open
    voting_deadline: Optional[datetime] = None


class SettingsOut(BaseModel):
    voting_deadline: Optional[datetime] = None
    is_voting_open: bool


class MessageOut(BaseModel):
    message: str
