# picvote/routes/admin_routes.py
import datetime
import logging
import os
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .. import config
from ..errors import AdminRequiredError, StoreUnavailableError, ValidationError
from ..models import Candidate, VoterRecord
from ..schemas import MessageOut, SettingsIn, SettingsOut
from ..vote_service import ResultsSummary, VoteService
from .deps import get_is_admin, get_service

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def save_upload(upload: UploadFile, prefix: str = "image") -> Tuple[str, str]:
    """
    Save an uploaded image to UPLOAD_DIR.
    Returns: (filename, public url path)
    """
    ext = os.path.splitext(upload.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported image type '{ext or upload.content_type}'")

    data = upload.file.read()
    if not data:
        raise ValidationError("Uploaded image is empty")

    upload_dir = Path(config.UPLOAD_DIR)
    stamp = int(datetime.datetime.now(datetime.timezone.utc).timestamp() * 1000)
    filename = f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}{ext}"
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        with open(upload_dir / filename, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error(f"Could not save upload {filename}: {e}")
        raise StoreUnavailableError("Could not save uploaded image")
    return filename, f"{config.UPLOAD_URL_PREFIX}/{filename}"


@admin_router.get("/images", response_model=List[Candidate])
def list_images(service: VoteService = Depends(get_service), is_admin: bool = Depends(get_is_admin)):
    return service.list_candidates(is_admin)


@admin_router.post("/images", response_model=Candidate)
def add_image(
    title: str = Form(...),
    description: str = Form(""),
    image: Optional[UploadFile] = File(None),
    service: VoteService = Depends(get_service),
    is_admin: bool = Depends(get_is_admin),
):
    # check before touching the disk, the service checks again
    if not is_admin:
        raise AdminRequiredError()
    if not title.strip():
        raise ValidationError("Title is required")
    image_ref = ""
    if image is not None and image.filename:
        _, image_ref = save_upload(image)
    candidate = service.add_candidate(title, description, image_ref, is_admin)
    logger.info(f"Candidate {candidate.id} added with image '{image_ref}'")
    return candidate


@admin_router.delete("/images/{image_id}", response_model=MessageOut)
def delete_image(image_id: str, service: VoteService = Depends(get_service),
                 is_admin: bool = Depends(get_is_admin)):
    service.delete_candidate(image_id, is_admin)
    return MessageOut(message="Image deleted")


@admin_router.get("/votes", response_model=List[VoterRecord])
def list_votes(service: VoteService = Depends(get_service), is_admin: bool = Depends(get_is_admin)):
    return service.list_voter_records(is_admin)


@admin_router.get("/results", response_model=ResultsSummary)
def get_results(service: VoteService = Depends(get_service), is_admin: bool = Depends(get_is_admin)):
    if not is_admin:
        raise AdminRequiredError()
    return service.list_candidates_with_results()


@admin_router.get("/settings", response_model=SettingsOut)
def get_settings(service: VoteService = Depends(get_service), is_admin: bool = Depends(get_is_admin)):
    if not is_admin:
        raise AdminRequiredError()
    return SettingsOut(voting_deadline=service.get_deadline(), is_voting_open=service.is_voting_open())


@admin_router.post("/settings", response_model=SettingsOut)
def update_settings(settings: SettingsIn, service: VoteService = Depends(get_service),
                    is_admin: bool = Depends(get_is_admin)):
    deadline = service.set_deadline(settings.voting_deadline, is_admin)
    return SettingsOut(voting_deadline=deadline, is_voting_open=service.is_voting_open())
