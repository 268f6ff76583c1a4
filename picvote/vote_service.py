# picvote/vote_service.py
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .clock import utc_now, ensure_utc
from .deadline import DeadlinePolicy
from .errors import (
    AdminRequiredError,
    CandidateNotFoundError,
    StoreUnavailableError,
    ValidationError,
    VotingClosedError,
)
from .ledger import VoterLedger
from .models import Candidate, VoterRecord
from .results import CandidateResult, compute_results, total_votes
from .storage import Store, is_valid_id

logger = logging.getLogger(__name__)


class ResultsSummary(BaseModel):
    results: List[CandidateResult]
    total_votes: int
    is_voting_open: bool
    deadline: Optional[datetime] = None


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _require_admin(is_admin: bool):
    if not is_admin:
        raise AdminRequiredError()


class VoteService:
    """Everything the routes are allowed to do with candidates, votes and the deadline."""

    def __init__(self, store: Store):
        self.store = store
        self.deadline = DeadlinePolicy(store)
        self.ledger = VoterLedger(store)

    # ------------------------------
    # Voting
    # ------------------------------

    def submit_vote(self, candidate_id: str, voter_name: str, voter_id: str,
                    now: Optional[datetime] = None) -> VoterRecord:
        now = ensure_utc(now) if now is not None else utc_now()

        if not self.deadline.is_open(now):
            logger.warning(f"Vote from {voter_id!r} rejected: voting is closed")
            raise VotingClosedError()

        voter_name = _clean(voter_name)
        voter_id = _clean(voter_id)
        if not voter_name or not voter_id or not candidate_id:
            raise ValidationError()
        if not is_valid_id(candidate_id):
            raise ValidationError("Invalid image ID format")

        if self.store.get_candidate(candidate_id) is None:
            raise CandidateNotFoundError(candidate_id)

        record = self.ledger.record(candidate_id, voter_name, voter_id, now)

        # The ledger entry and the tally move together: undo the entry if +1 fails
        try:
            incremented = self.store.increment_vote_count(candidate_id)
        except StoreUnavailableError:
            self._rollback(voter_id)
            raise
        if not incremented:
            logger.warning(f"Candidate {candidate_id} was deleted while {voter_id} was voting")
            self._rollback(voter_id)
            raise CandidateNotFoundError(candidate_id)

        return record

    def _rollback(self, voter_id: str):
        try:
            self.ledger.rollback(voter_id)
        except StoreUnavailableError:
            # The caller still gets the original failure
            logger.error(f"Could not roll back vote of {voter_id}; ledger and tally disagree")

    def has_voted(self, voter_id: str) -> bool:
        return self.ledger.has_voted(_clean(voter_id))

    # ------------------------------
    # Reading
    # ------------------------------

    def is_voting_open(self, now: Optional[datetime] = None) -> bool:
        return self.deadline.is_open(now)

    def get_deadline(self) -> Optional[datetime]:
        return self.deadline.get_deadline()

    def list_public_candidates(self) -> List[Candidate]:
        return self.store.list_candidates()

    def list_candidates_with_results(self, now: Optional[datetime] = None) -> ResultsSummary:
        candidates = self.store.list_candidates()
        return ResultsSummary(
            results=compute_results(candidates),
            total_votes=total_votes(candidates),
            is_voting_open=self.deadline.is_open(now),
            deadline=self.deadline.get_deadline(),
        )

    # ------------------------------
    # Admin only
    # ------------------------------

    def set_deadline(self, deadline: Optional[datetime], is_admin: bool) -> Optional[datetime]:
        _require_admin(is_admin)
        new_deadline = self.deadline.set_deadline(deadline)
        logger.info(f"Voting deadline set to {new_deadline}")
        return new_deadline

    def add_candidate(self, title: str, description: str, image_ref: str, is_admin: bool) -> Candidate:
        _require_admin(is_admin)
        title = _clean(title)
        if not title:
            raise ValidationError("Title is required")
        return self.store.create_candidate(title, _clean(description), image_ref or "")

    def delete_candidate(self, candidate_id: str, is_admin: bool):
        _require_admin(is_admin)
        if not is_valid_id(candidate_id):
            raise ValidationError("Invalid image ID format")
        # Ledger entries pointing at it stay where they are
        if not self.store.delete_candidate(candidate_id):
            raise CandidateNotFoundError(candidate_id)
        logger.info(f"Candidate {candidate_id} deleted")

    def list_candidates(self, is_admin: bool) -> List[Candidate]:
        _require_admin(is_admin)
        return list(reversed(self.store.list_candidates()))

    def list_voter_records(self, is_admin: bool) -> List[VoterRecord]:
        _require_admin(is_admin)
        return self.ledger.list_records()
