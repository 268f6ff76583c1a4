# picvote/setup_admin.py
# Creates the default admin account. Run once: python -m picvote.setup_admin
import logging
import sys

from . import config
from .crud import create_admin
from .database import get_store
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def setup_admin(store=None) -> int:
    store = store or get_store()
    if store.get_admin_by_email(config.DEFAULT_ADMIN_EMAIL.lower()):
        print("Admin already exists")
        return 0

    admin = create_admin(store, config.DEFAULT_ADMIN_NAME, config.DEFAULT_ADMIN_EMAIL,
                         config.DEFAULT_ADMIN_PASSWORD)
    if admin is None:
        print("Admin already exists")
        return 0
    print("Admin user created successfully!")
    print(f"Email: {admin.email}")
    return 0


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    try:
        return setup_admin()
    except StoreUnavailableError as e:
        logger.error(f"Error setting up admin: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
