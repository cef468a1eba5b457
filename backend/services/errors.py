# backend/services/errors.py
"""
Closed set of application errors.

Repositories raise only these; SQLAlchemy/driver exceptions are translated
here so handlers never branch on driver-specific error codes.
"""
import logging
from contextlib import contextmanager
from typing import Optional, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str = "") -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input."


class NotFound(AppError):
    # Covers both "missing" and "owned by someone else".
    status_code = 404
    default_message = "Not found."


class EmptyDeck(NotFound):
    default_message = "This deck has no cards yet."


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict."


class DuplicateEmail(Conflict):
    default_message = "An account with this email already exists."


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Incorrect email or password."


class NoSuchAccount(InvalidCredentials):
    pass


class WrongPassword(InvalidCredentials):
    pass


class StoreError(AppError):
    status_code = 500
    default_message = "Database error. Please try again."


class AuthRequired(AppError):
    status_code = 401
    default_message = "Please log in first."


class ApiAuthRequired(AuthRequired):
    pass


@contextmanager
def translate_store_errors(db: Session, action: str, conflict: Optional[Type[AppError]] = None):
    """
    Roll back and re-raise store failures as StoreError (or `conflict` for
    integrity violations when given). AppErrors raised inside the block also
    roll back before propagating.
    """
    try:
        yield
    except AppError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if conflict is not None:
            raise conflict() from exc
        log.exception("Integrity error while %s", action)
        raise StoreError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        log.exception("Store error while %s", action)
        raise StoreError() from exc
