# services/users.py

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from models.user import User


def normalize_email(email) -> str:
    """Emails are stored lowercased; identity lookups ignore case too."""
    return str(email).strip().lower()


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    # func.lower also matches rows written before emails were normalized
    return session.exec(
        select(User).where(func.lower(User.email) == normalize_email(email))
    ).first()
