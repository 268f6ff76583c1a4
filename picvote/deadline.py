# picvote/deadline.py
from datetime import datetime
from typing import Optional

from .clock import utc_now, ensure_utc
from .storage import Store


class DeadlinePolicy:
    """Reads and writes the single voting deadline kept in the settings row."""

    def __init__(self, store: Store):
        self.store = store

    def get_deadline(self) -> Optional[datetime]:
        return ensure_utc(self.store.get_settings().deadline)

    def is_open(self, now: Optional[datetime] = None) -> bool:
        deadline = self.get_deadline()
        if deadline is None:
            return True
        now = ensure_utc(now) if now is not None else utc_now()
        return now < deadline

    def set_deadline(self, deadline: Optional[datetime]) -> Optional[datetime]:
        # A deadline in the past is allowed and simply closes voting
        return self.store.set_deadline(ensure_utc(deadline)).deadline
