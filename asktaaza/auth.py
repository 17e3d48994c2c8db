from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .db import get_session
from .models import User


# PBKDF2-SHA256 avoids platform-specific bcrypt issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def get_current_user(
    request: Request, db: Session = Depends(get_session)
) -> Optional[User]:
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return db.get(User, int(user_id))


def require_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be signed in to submit a question",
        )
    return user


def is_admin_email(email: Optional[str]) -> bool:
    admins = get_settings().admin_emails
    if not email or not admins:
        return False
    return email.strip().lower() in admins


def get_is_admin(user: Optional[User] = Depends(get_current_user)) -> bool:
    if not user:
        return False
    return is_admin_email(user.email)


def require_admin(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user or not is_admin_email(user.email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return user
