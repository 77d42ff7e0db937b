# core/user_service.py
import logging

from sqlalchemy.orm import Session

from core.auth_service import hash_password, require_role
from core.config import ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD
from core.db import commit
from core.errors import ValidationError
from core.logger import log_action
from core.validators import validate_email, validate_password, validate_text
from models.user import User

logger = logging.getLogger(__name__)


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def _create_user(db: Session, name, email, password, role: str) -> User:
    name = validate_text(name, "name")
    email = validate_email(email)
    password = validate_password(password)
    if db.query(User).filter(User.email == email).first():
        raise ValidationError("Email already registered")

    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    return user


def register_user(db: Session, name, email, password) -> User:
    """Self-service signup; always creates a plain `user`."""
    user = _create_user(db, name, email, password, role="user")
    commit(db)
    logger.info("Registered user %s", user.email)
    return user


def create_moderator(db: Session, actor: User, name, email, password) -> User:
    require_role(actor, "admin")
    user = _create_user(db, name, email, password, role="moderator")
    db.flush()
    log_action(db, actor, "create_moderator", "user", user.id)
    commit(db)
    return user


def create_default_admin(db: Session):
    existing = db.query(User).filter(User.email == ADMIN_EMAIL.lower()).first()
    if existing:
        logger.info("Admin already exists.")
        return existing
    admin = User(
        name=ADMIN_NAME,
        email=ADMIN_EMAIL.lower(),
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
    )
    db.add(admin)
    commit(db)
    logger.info("Default admin created: %s", admin.email)
    return admin
