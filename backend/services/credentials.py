# backend/services/credentials.py
import logging
from functools import lru_cache

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from models import User
from .errors import (
    DuplicateEmail, NoSuchAccount, ValidationError, WrongPassword, translate_store_errors,
)

log = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    # Checked against when the account does not exist so both failure paths cost one bcrypt compare.
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds))


def _normalize(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def register(db: Session, email: str, password: str, rounds: int = DEFAULT_ROUNDS) -> User:
    email_norm = _normalize(email)
    if not email_norm or not password:
        raise ValidationError("Email and password are required.")

    user = User(email=email_norm, password_hash=hash_password(password, rounds))
    with translate_store_errors(db, "registering user", conflict=DuplicateEmail):
        db.add(user)
        db.commit()
        db.refresh(user)

    log.info("Registered user id=%s", user.id)
    return user


def verify(db: Session, email: str, password: str, rounds: int = DEFAULT_ROUNDS) -> User:
    """
    Return the user for (email, password).

    Raises NoSuchAccount or WrongPassword; callers show the same message for
    both so the login form does not reveal which accounts exist.
    `rounds` should match the cost used for stored hashes.
    """
    email_norm = _normalize(email)
    with translate_store_errors(db, "looking up user"):
        user = db.execute(select(User).where(User.email == email_norm)).scalar_one_or_none()

    if user is None:
        bcrypt.checkpw((password or "").encode("utf-8"), _dummy_hash(rounds))
        raise NoSuchAccount()

    if not check_password(password or "", user.password_hash):
        raise WrongPassword()
    return user
