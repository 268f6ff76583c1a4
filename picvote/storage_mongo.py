# picvote/storage_mongo.py
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional, Dict, Any, List

from bson import ObjectId
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from . import config
from .clock import utc_now, ensure_utc
from .errors import DuplicateVoterError, StoreUnavailableError
from .models import Admin, Candidate, Settings, VoterRecord
from .storage import Store, is_valid_id

logger = logging.getLogger(__name__)

SETTINGS_ID = "voting"


@contextmanager
def driver_errors(action: str):
    """Turn any pymongo failure into StoreUnavailableError."""
    try:
        yield
    except PyMongoError as e:
        logger.error(f"MongoDB error while trying to {action}: {e}")
        raise StoreUnavailableError(f"Database error while trying to {action}")


def _candidate_from_doc(doc: Dict[str, Any]) -> Candidate:
    return Candidate(
        id=str(doc["_id"]),
        title=doc.get("title", ""),
        description=doc.get("description", ""),
        image_ref=doc.get("image_url", ""),
        vote_count=doc.get("votes", 0),
        created_at=ensure_utc(doc.get("created_at")),
    )


def _record_from_doc(doc: Dict[str, Any]) -> VoterRecord:
    return VoterRecord(
        id=str(doc["_id"]),
        candidate_id=str(doc["image_id"]),
        voter_name=doc["name"],
        voter_id=doc["nim"],
        timestamp=ensure_utc(doc["created_at"]),
    )


def _admin_from_doc(doc: Dict[str, Any]) -> Admin:
    return Admin(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        email=doc["email"],
        hashed_password=doc["hashed_password"],
    )


class MongoStore(Store):
    def __init__(self, uri: str = config.MONGO_URI, db_name: str = config.MONGO_DB,
                 client: Optional[MongoClient] = None):
        """Initialize MongoDB connection and the indexes the voting rules rely on"""
        try:
            self.client = client if client is not None else MongoClient(uri, tz_aware=True)
            self.db = self.client[db_name]
            self.candidates = self.db[config.CANDIDATES_COLLECTION_NAME]
            self.votes = self.db[config.VOTES_COLLECTION_NAME]
            self.settings = self.db[config.SETTINGS_COLLECTION_NAME]
            self.admins = self.db[config.ADMINS_COLLECTION_NAME]

            # One ledger entry per student ID - this is what closes the double-vote race
            self.votes.create_index("nim", unique=True)
            self.votes.create_index([("created_at", DESCENDING)])
            self.admins.create_index("email", unique=True)

            self.client.server_info()
            logger.info(f"Connected to MongoDB database: {db_name}")
        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise StoreUnavailableError("Could not connect to MongoDB")

    # ---------- candidates ----------

    def create_candidate(self, title: str, description: str, image_ref: str) -> Candidate:
        doc = {
            "title": title,
            "description": description,
            "image_url": image_ref,
            "votes": 0,
            "created_at": utc_now(),
        }
        with driver_errors("create candidate"):
            result = self.candidates.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Candidate {result.inserted_id} created")
        return _candidate_from_doc(doc)

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        if not is_valid_id(candidate_id):
            return None
        with driver_errors("read candidate"):
            doc = self.candidates.find_one({"_id": ObjectId(candidate_id)})
        return _candidate_from_doc(doc) if doc else None

    def list_candidates(self) -> List[Candidate]:
        with driver_errors("list candidates"):
            docs = list(self.candidates.find({}).sort([("created_at", ASCENDING), ("_id", ASCENDING)]))
        return [_candidate_from_doc(d) for d in docs]

    def delete_candidate(self, candidate_id: str) -> bool:
        if not is_valid_id(candidate_id):
            return False
        with driver_errors("delete candidate"):
            result = self.candidates.delete_one({"_id": ObjectId(candidate_id)})
        return result.deleted_count > 0

    def increment_vote_count(self, candidate_id: str) -> bool:
        if not is_valid_id(candidate_id):
            return False
        with driver_errors("update vote count"):
            result = self.candidates.update_one(
                {"_id": ObjectId(candidate_id)},
                {"$inc": {"votes": 1}}
            )
        return result.matched_count > 0

    # ---------- voter ledger ----------

    def insert_voter_record(self, candidate_id: str, voter_name: str, voter_id: str,
                            timestamp: datetime) -> VoterRecord:
        doc = {
            "image_id": ObjectId(candidate_id),
            "name": voter_name,
            "nim": voter_id,
            "created_at": ensure_utc(timestamp),
        }
        try:
            result = self.votes.insert_one(doc)
        except DuplicateKeyError:
            logger.warning(f"Voter {voter_id} already voted")
            raise DuplicateVoterError(voter_id)
        except PyMongoError as e:
            logger.error(f"Error saving vote for {voter_id}: {e}")
            raise StoreUnavailableError("Database error while trying to save vote")
        doc["_id"] = result.inserted_id
        return _record_from_doc(doc)

    def find_voter_record(self, voter_id: str) -> Optional[VoterRecord]:
        with driver_errors("read vote"):
            doc = self.votes.find_one({"nim": voter_id})
        return _record_from_doc(doc) if doc else None

    def delete_voter_record(self, voter_id: str) -> bool:
        with driver_errors("delete vote"):
            result = self.votes.delete_one({"nim": voter_id})
        return result.deleted_count > 0

    def list_voter_records(self) -> List[VoterRecord]:
        with driver_errors("list votes"):
            docs = list(self.votes.find({}).sort("created_at", DESCENDING))
        return [_record_from_doc(d) for d in docs]

    def count_voter_records(self) -> int:
        with driver_errors("count votes"):
            return self.votes.count_documents({})

    # ---------- settings ----------

    def get_settings(self) -> Settings:
        with driver_errors("read settings"):
            doc = self.settings.find_one({"_id": SETTINGS_ID})
        if not doc:
            return Settings()
        return Settings(
            deadline=ensure_utc(doc.get("voting_deadline")),
            updated_at=ensure_utc(doc.get("updated_at")),
        )

    def set_deadline(self, deadline: Optional[datetime]) -> Settings:
        with driver_errors("update settings"):
            doc = self.settings.find_one_and_update(
                {"_id": SETTINGS_ID},
                {"$set": {"voting_deadline": ensure_utc(deadline), "updated_at": utc_now()}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return Settings(
            deadline=ensure_utc(doc.get("voting_deadline")),
            updated_at=ensure_utc(doc.get("updated_at")),
        )

    # ---------- admins ----------

    def create_admin(self, name: str, email: str, hashed_password: str) -> Optional[Admin]:
        doc = {"name": name, "email": email, "hashed_password": hashed_password}
        try:
            result = self.admins.insert_one(doc)
        except DuplicateKeyError:
            logger.warning(f"Admin with email {email} already exists.")
            return None
        except PyMongoError as e:
            logger.error(f"Error creating admin {email}: {e}")
            raise StoreUnavailableError("Database error while trying to create admin")
        doc["_id"] = result.inserted_id
        return _admin_from_doc(doc)

    def get_admin_by_email(self, email: str) -> Optional[Admin]:
        with driver_errors("read admin"):
            doc = self.admins.find_one({"email": email})
        return _admin_from_doc(doc) if doc else None

    def close(self):
        """Close MongoDB connection"""
        try:
            self.client.close()
            logger.info("MongoDB connection closed")
        except PyMongoError as e:
            logger.error(f"Error closing MongoDB connection: {e}")
