# core/logger.py
import logging

from core.config import LOG_LEVEL
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = LOG_LEVEL):
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def log_action(db, actor, action: str, entity: str = None, entity_id: int = None):
    """
    Record an admin or moderator action into the audit log.

    The row joins the caller's transaction, so it is only kept if the change it
    describes is committed.
    """
    db.add(AuditLog(
        actor_id=getattr(actor, "id", None),
        actor_email=getattr(actor, "email", None) or "system",
        action=action,
        entity=entity,
        entity_id=entity_id,
    ))
    logger.info("%s %s %s#%s", getattr(actor, "email", "system"), action, entity, entity_id)
