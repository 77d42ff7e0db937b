from sqlalchemy import Column, Integer, String, DateTime
from core.db import Base
from core.utils import utcnow

ROLES = ("user", "moderator", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="user", nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
