from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from api.deps import get_current_user
from api.schemas import RegisterBody
from api.serializers import user_to_dict
from core.auth_service import authenticate_user, create_access_token
from core.db import get_db
from core.user_service import create_moderator, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterBody, db: Session = Depends(get_db)):
    user = register_user(db, body.name, body.email, body.password)
    return {"user": user_to_dict(user), "access_token": create_access_token(user), "token_type": "bearer"}


@router.post("/token")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate_user(db, form_data.username, form_data.password)
    return {"access_token": create_access_token(user), "token_type": "bearer"}


@router.get("/me")
def me(user=Depends(get_current_user)):
    return user_to_dict(user)


@router.post("/moderators", status_code=status.HTTP_201_CREATED)
def add_moderator(body: RegisterBody, user=Depends(get_current_user), db: Session = Depends(get_db)):
    moderator = create_moderator(db, user, body.name, body.email, body.password)
    return user_to_dict(moderator)
