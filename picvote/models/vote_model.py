from datetime import datetime

from pydantic import BaseModel


class VoterRecord(BaseModel):
    """One ledger entry. Written once per voter_id and never edited."""
    id: str
    candidate_id: str
    voter_name: str
    voter_id: str  # student ID (NIM)
    timestamp: datetime
