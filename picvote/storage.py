# picvote/storage.py
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Dict, Any, List

from bson import ObjectId

from .clock import utc_now, ensure_utc
from .errors import DuplicateVoterError, StoreUnavailableError
from .models import Admin, Candidate, Settings, VoterRecord

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(ObjectId())


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


class Store(ABC):
    """
    Persistence boundary used by the voting core.

    Implementations must make insert_voter_record fail with DuplicateVoterError
    when the voter_id is already present (a real uniqueness constraint, not a
    lookup followed by a write) and must make increment_vote_count a single
    atomic +1.  Driver failures surface as StoreUnavailableError.
    """

    # --- Candidates ---
    @abstractmethod
    def create_candidate(self, title: str, description: str, image_ref: str) -> Candidate: ...

    @abstractmethod
    def get_candidate(self, candidate_id: str) -> Optional[Candidate]: ...

    @abstractmethod
    def list_candidates(self) -> List[Candidate]:
        """Candidates in creation order."""

    @abstractmethod
    def delete_candidate(self, candidate_id: str) -> bool: ...

    @abstractmethod
    def increment_vote_count(self, candidate_id: str) -> bool:
        """Add exactly one vote. Returns False if the candidate does not exist."""

    # --- Voter ledger ---
    @abstractmethod
    def insert_voter_record(self, candidate_id: str, voter_name: str, voter_id: str,
                            timestamp: datetime) -> VoterRecord: ...

    @abstractmethod
    def find_voter_record(self, voter_id: str) -> Optional[VoterRecord]: ...

    @abstractmethod
    def delete_voter_record(self, voter_id: str) -> bool: ...

    @abstractmethod
    def list_voter_records(self) -> List[VoterRecord]:
        """Ledger entries, newest first."""

    @abstractmethod
    def count_voter_records(self) -> int: ...

    # --- Settings (single row) ---
    @abstractmethod
    def get_settings(self) -> Settings: ...

    @abstractmethod
    def set_deadline(self, deadline: Optional[datetime]) -> Settings: ...

    # --- Admins ---
    @abstractmethod
    def create_admin(self, name: str, email: str, hashed_password: str) -> Optional[Admin]:
        """Returns None when an admin with that email already exists."""

    @abstractmethod
    def get_admin_by_email(self, email: str) -> Optional[Admin]: ...

    def close(self):
        pass


def _empty_db() -> Dict[str, Any]:
    return {"candidates": {}, "votes": {}, "settings": None, "admins": {}}


class JsonStore(Store):
    """
    Store kept in a single JSON file (or only in memory when path is None).

    Every operation runs under one re-entrant lock, which gives the voter_id
    uniqueness and the vote counter the same guarantees the Mongo indexes do
    for a single process.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or None
        self._lock = threading.RLock()
        self._db = self._load()

    # ---------- file handling ----------

    def _load(self) -> Dict[str, Any]:
        if not self.path:
            return _empty_db()
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            if not os.path.exists(self.path):
                data = _empty_db()
                self._write(data)
                logger.info(f"Created new data file at {self.path}")
                return data
            with open(self.path, "r") as f:
                data = json.load(f)
        except OSError as e:
            logger.error(f"Could not open data file {self.path}: {e}")
            raise StoreUnavailableError(f"Could not open data file: {e}")
        except json.JSONDecodeError as e:
            # Never auto-reset: that would silently drop recorded votes
            logger.error(f"Data file {self.path} is corrupted: {e}")
            raise StoreUnavailableError("Data file is corrupted")
        for key, default in _empty_db().items():
            data.setdefault(key, default)
        return data

    def _write(self, data: Dict[str, Any]):
        if not self.path:
            return
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def _commit(self, undo):
        """Flush to disk; on failure run undo so memory matches the file again."""
        try:
            self._write(self._db)
        except OSError as e:
            undo()
            logger.error(f"Failed to write data file {self.path}: {e}")
            raise StoreUnavailableError(f"Failed to write data file: {e}")

    # ---------- candidates ----------

    def create_candidate(self, title: str, description: str, image_ref: str) -> Candidate:
        candidate = Candidate(
            id=new_id(), title=title, description=description,
            image_ref=image_ref, vote_count=0, created_at=utc_now(),
        )
        with self._lock:
            self._db["candidates"][candidate.id] = candidate.model_dump(mode="json")
            self._commit(lambda: self._db["candidates"].pop(candidate.id, None))
        return candidate

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        with self._lock:
            doc = self._db["candidates"].get(candidate_id)
            return Candidate(**doc) if doc else None

    def list_candidates(self) -> List[Candidate]:
        with self._lock:
            # dicts keep insertion order, which is creation order
            return [Candidate(**doc) for doc in self._db["candidates"].values()]

    def delete_candidate(self, candidate_id: str) -> bool:
        with self._lock:
            doc = self._db["candidates"].pop(candidate_id, None)
            if doc is None:
                return False

            def undo():
                self._db["candidates"][candidate_id] = doc
            self._commit(undo)
            return True

    def increment_vote_count(self, candidate_id: str) -> bool:
        with self._lock:
            doc = self._db["candidates"].get(candidate_id)
            if doc is None:
                return False
            doc["vote_count"] += 1

            def undo():
                doc["vote_count"] -= 1
            self._commit(undo)
            return True

    # ---------- voter ledger ----------

    def insert_voter_record(self, candidate_id: str, voter_name: str, voter_id: str,
                            timestamp: datetime) -> VoterRecord:
        record = VoterRecord(
            id=new_id(), candidate_id=candidate_id, voter_name=voter_name,
            voter_id=voter_id, timestamp=ensure_utc(timestamp),
        )
        with self._lock:
            if voter_id in self._db["votes"]:
                raise DuplicateVoterError(voter_id)
            self._db["votes"][voter_id] = record.model_dump(mode="json")
            self._commit(lambda: self._db["votes"].pop(voter_id, None))
        return record

    def find_voter_record(self, voter_id: str) -> Optional[VoterRecord]:
        with self._lock:
            doc = self._db["votes"].get(voter_id)
            return VoterRecord(**doc) if doc else None

    def delete_voter_record(self, voter_id: str) -> bool:
        with self._lock:
            doc = self._db["votes"].pop(voter_id, None)
            if doc is None:
                return False

            def undo():
                self._db["votes"][voter_id] = doc
            self._commit(undo)
            return True

    def list_voter_records(self) -> List[VoterRecord]:
        with self._lock:
            records = [VoterRecord(**doc) for doc in self._db["votes"].values()]
        return list(reversed(records))

    def count_voter_records(self) -> int:
        with self._lock:
            return len(self._db["votes"])

    # ---------- settings ----------

    def get_settings(self) -> Settings:
        with self._lock:
            doc = self._db["settings"]
            return Settings(**doc) if doc else Settings()

    def set_deadline(self, deadline: Optional[datetime]) -> Settings:
        settings = Settings(deadline=ensure_utc(deadline), updated_at=utc_now())
        with self._lock:
            previous = self._db["settings"]
            self._db["settings"] = settings.model_dump(mode="json")

            def undo():
                self._db["settings"] = previous
            self._commit(undo)
        return settings

    # ---------- admins ----------

    def create_admin(self, name: str, email: str, hashed_password: str) -> Optional[Admin]:
        admin = Admin(id=new_id(), name=name, email=email, hashed_password=hashed_password)
        with self._lock:
            if email in self._db["admins"]:
                logger.warning(f"Admin with email {email} already exists.")
                return None
            self._db["admins"][email] = admin.model_dump()
            self._commit(lambda: self._db["admins"].pop(email, None))
        return admin

    def get_admin_by_email(self, email: str) -> Optional[Admin]:
        with self._lock:
            doc = self._db["admins"].get(email)
            return Admin(**doc) if doc else None
