# picvote/routes/vote_routes.py
import logging

from fastapi import APIRouter, Depends

from ..schemas import ImagesOut, VoteIn, VoteOut
from ..vote_service import ResultsSummary, VoteService
from .deps import get_service

logger = logging.getLogger(__name__)

vote_router = APIRouter(prefix="/votes", tags=["Vote"])


# ------------------------------
# Candidates shown on the voting page
# ------------------------------
@vote_router.get("/images", response_model=ImagesOut)
def list_images(service: VoteService = Depends(get_service)):
    return ImagesOut(
        images=service.list_public_candidates(),
        is_voting_open=service.is_voting_open(),
        deadline=service.get_deadline(),
    )


# ------------------------------
# Cast vote
# ------------------------------
@vote_router.post("/vote", response_model=VoteOut)
def cast_vote(vote: VoteIn, service: VoteService = Depends(get_service)):
    """
    Records one vote per student ID (nim).

    Errors come back as {"detail": ...}: 400 when voting is closed, input is
    missing or the student already voted, 404 for an unknown image.
    """
    record = service.submit_vote(vote.image_id, vote.name, vote.nim)
    return VoteOut(message="Vote recorded successfully", vote_id=record.id, image_id=record.candidate_id)


# ------------------------------
# Current results
# ------------------------------
@vote_router.get("/results", response_model=ResultsSummary)
def get_results(service: VoteService = Depends(get_service)):
    return service.list_candidates_with_results()
