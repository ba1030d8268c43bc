import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core import security
from goalsync.models import user as user_model
from goalsync.schemas import auth_schemas
from goalsync.api.dependencies import get_db

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[user_model.User]:
    return db.query(user_model.User).filter(user_model.User.email == email.lower()).first()


def get_user(db: Session, user_id: str) -> Optional[user_model.User]:
    return db.query(user_model.User).filter(user_model.User.id == user_id).first()


def register_user(db: Session, registration: auth_schemas.RegisterRequest) -> user_model.User:
    if get_user_by_email(db, registration.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    db_user = user_model.User(
        email=registration.email.lower(),
        name=registration.name,
        password_hash=security.get_password_hash(registration.password),
        type=registration.type,
        status="active",
        push_tokens=[],
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Registered %s user %s", db_user.type, db_user.id)
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> user_model.User:
    user = get_user_by_email(db, email)
    if not user or not security.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def issue_token(user: user_model.User) -> str:
    return security.create_access_token(user.id)


def user_from_token(db: Session, token: str) -> user_model.User:
    token_data = security.decode_access_token(token)
    user = get_user(db, token_data.user_id) if token_data else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(token: str = Depends(security.oauth2_scheme), db: Session = Depends(get_db)) -> user_model.User:
    return user_from_token(db, token)
