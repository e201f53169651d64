import logging

from foodlink.models.profile import Profile
from foodlink.models.listing import ProduceListing, PurchaseRequest, AssistanceProgram
from foodlink.db.session import engine, Base

logger = logging.getLogger(__name__)


def init_db(bind=None):
    # Create all tables
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
