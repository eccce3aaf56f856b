# core/security.py

import secrets

from passlib.hash import pbkdf2_sha256 as hasher

from core.config import settings


def generate_temporary_password(nbytes: int = None) -> str:
    """
    One-time bootstrap credential handed to the identity provider on approval.
    Superseded by the magic link the user receives.
    """
    return secrets.token_urlsafe(nbytes or settings.TEMP_PASSWORD_BYTES)


def hash_password(password: str) -> str:
    return hasher.hash(password)
