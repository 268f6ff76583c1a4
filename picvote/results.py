# picvote/results.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from pydantic import BaseModel

from .models import Candidate

TWO_PLACES = Decimal("0.01")


class CandidateResult(BaseModel):
    candidate: Candidate
    percentage: float


def total_votes(candidates: Iterable[Candidate]) -> int:
    return sum(c.vote_count for c in candidates)


def percentage_of(votes: int, total: int) -> float:
    """Share of total in percent, rounded half-up to two decimals (0 when total is 0)."""
    if total <= 0:
        return 0.0
    share = Decimal(votes) * 100 / Decimal(total)
    return float(share.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def compute_results(candidates: Iterable[Candidate]) -> List[CandidateResult]:
    """
    Percentage breakdown, most votes first.

    Candidates with equal votes keep their input order. Percentages are
    rounded independently, so they may not add up to exactly 100.
    """
    candidates = list(candidates)
    total = total_votes(candidates)
    ordered = sorted(candidates, key=lambda c: c.vote_count, reverse=True)
    return [CandidateResult(candidate=c, percentage=percentage_of(c.vote_count, total)) for c in ordered]
