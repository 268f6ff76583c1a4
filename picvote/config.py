# picvote/config.py
# Central place for settings and constants
import os
from dotenv import load_dotenv

load_dotenv()

# Storage backend: "json" (single file, good for a classroom laptop) or "mongo"
STORE_BACKEND = os.getenv("STORE_BACKEND", "json").lower()

# JSON store path - set to an empty string to keep everything in memory
DATA_DB_PATH = os.getenv("DATA_DB_PATH", "data/picvote_db.json")

# --- Database Config ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "voting_app")
CANDIDATES_COLLECTION_NAME = "images"
VOTES_COLLECTION_NAME = "votes"
SETTINGS_COLLECTION_NAME = "settings"
ADMINS_COLLECTION_NAME = "admins"

# --- Security & JWT Config ---
# In production, use secure, environment-variable-based secrets
SECRET_KEY = os.getenv("SECRET_KEY", "a_very_secret_key_for_dev_only")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

# --- Default admin (used by setup_admin) ---
DEFAULT_ADMIN_NAME = os.getenv("DEFAULT_ADMIN_NAME", "Admin User")
DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

# --- Uploads ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_URL_PREFIX = "/uploads"

# Comma separated list of allowed frontend origins
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]
