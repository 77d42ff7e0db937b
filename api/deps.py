from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.auth_service import decode_access_token
from core.db import get_db
from core.errors import AuthenticationError
from core.user_service import get_user_by_id

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    """Resolve the bearer token to a User row; 401 if missing, invalid or stale."""
    if not token:
        raise AuthenticationError("Unauthorized: Please login first")
    payload = decode_access_token(token)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Could not validate credentials")
    user = get_user_by_id(db, user_id)
    if not user:
        raise AuthenticationError("Could not validate credentials")
    return user
