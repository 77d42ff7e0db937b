# core/auth_service.py
import logging
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from core.config import SECRET_KEY, TOKEN_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from core.errors import AuthenticationError, AuthorizationError
from core.utils import utcnow
from models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the user for valid credentials, raise AuthenticationError otherwise."""
    user = db.query(User).filter(User.email == (email or "").strip().lower()).first()
    if not user or not verify_password(password or "", user.password_hash):
        logger.info("Failed login for %s", email)
        raise AuthenticationError("Incorrect email or password")
    return user


def create_access_token(user: User, expires_delta: timedelta = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(claims, SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the token claims; AuthenticationError if invalid or expired."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Could not validate credentials")
    if not payload.get("sub"):
        raise AuthenticationError("Could not validate credentials")
    return payload


def require_role(actor, *roles):
    """Raise AuthorizationError unless the actor holds one of `roles`."""
    if actor is None or getattr(actor, "role", None) not in roles:
        raise AuthorizationError(f"Only {' or '.join(roles)} users may do this")
