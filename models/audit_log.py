from sqlalchemy import Column, Integer, String, DateTime
from core.db import Base
from core.utils import utcnow


class AuditLog(Base):
    """Trail of privileged changes: menu edits, moderator creation, order status."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, nullable=True)
    actor_email = Column(String, nullable=False)
    action = Column(String, nullable=False)
    entity = Column(String, nullable=True)
    entity_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<AuditLog {self.actor_email}: {self.action} {self.entity}#{self.entity_id}>"
