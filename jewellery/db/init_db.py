import logging

from jewellery.core.config import ADMIN_EMAIL, ADMIN_PASSWORD
from jewellery.db.session import Base, SessionLocal, engine
from jewellery.models import entities  # noqa: F401  registers the tables on Base
from jewellery.services.category_service import CategoryService
from jewellery.services.user_service import UserService

logger = logging.getLogger(__name__)

def init_db(bind=None, session_factory=None):
    """Create tables, seed the default categories and the optional bootstrap admin."""
    Base.metadata.create_all(bind=bind or engine)
    db = (session_factory or SessionLocal)()
    try:
        CategoryService(db).seed_default_categories()
        if ADMIN_EMAIL and ADMIN_PASSWORD:
            UserService(db).ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    finally:
        db.close()
    logger.info("Database initialised")
