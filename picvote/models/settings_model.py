from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Settings(BaseModel):
    # None means voting never closes
    deadline: Optional[datetime] = None
    updated_at: Optional[datetime] = None
