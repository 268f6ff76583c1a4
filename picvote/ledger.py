# picvote/ledger.py
import logging
from datetime import datetime
from typing import List, Optional

from .clock import utc_now
from .models import VoterRecord
from .storage import Store

logger = logging.getLogger(__name__)


class VoterLedger:
    """
    Append-only record of who voted for what, one entry per voter_id.

    Uniqueness is enforced by the store itself; record() does not look
    before it writes, so two concurrent submissions for the same voter_id
    cannot both get through.
    """

    def __init__(self, store: Store):
        self.store = store

    def has_voted(self, voter_id: str) -> bool:
        return self.store.find_voter_record(voter_id) is not None

    def get(self, voter_id: str) -> Optional[VoterRecord]:
        return self.store.find_voter_record(voter_id)

    def record(self, candidate_id: str, voter_name: str, voter_id: str,
               now: Optional[datetime] = None) -> VoterRecord:
        """
        Append an entry for voter_id.

        Raises:
            DuplicateVoterError: voter_id already has an entry
            StoreUnavailableError: the store could not be written
        """
        record = self.store.insert_voter_record(candidate_id, voter_name, voter_id, now or utc_now())
        logger.info(f"Recorded vote of {voter_id} for candidate {candidate_id}")
        return record

    def rollback(self, voter_id: str) -> bool:
        """Remove the entry of a submission that never got its tally increment."""
        removed = self.store.delete_voter_record(voter_id)
        if removed:
            logger.warning(f"Rolled back vote of {voter_id}")
        return removed

    def list_records(self) -> List[VoterRecord]:
        return self.store.list_voter_records()

    def count(self) -> int:
        return self.store.count_voter_records()
