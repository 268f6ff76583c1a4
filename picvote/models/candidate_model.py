from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Candidate(BaseModel):
    id: str
    title: str
    description: str = ""
    image_ref: str = ""
    vote_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
