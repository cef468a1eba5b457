# backend/apis/auth_api.py
import logging
from typing import Callable

from fastapi import Depends, Form, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from schemas import LoginIn, RegisterIn
from services import credentials
from services.errors import AppError, DuplicateEmail, InvalidCredentials
from .rendering import pop_flash, redirect, render
from .session_gate import current_user, is_authenticated, login_session, logout_session

log = logging.getLogger(__name__)


def home(request: Request):
    if is_authenticated(request.session):
        return redirect("/dashboard")
    return render(request, "home.html")


def login_page(request: Request):
    return render(request, "login.html", {"message": pop_flash(request)})


def register_page(request: Request):
    return render(request, "register.html", {"message": pop_flash(request)})


class RegisterAPI:
    def __init__(self, session_factory: Callable[[], Session], rounds: int = credentials.DEFAULT_ROUNDS) -> None:
        self.SessionLocal = session_factory
        self.rounds = rounds

    def __call__(self, request: Request, email: str = Form(""), password: str = Form("")):
        try:
            payload = RegisterIn(email=email, password=password)
        except PydanticValidationError:
            return redirect("/register", "Please enter a valid email and password.", request)

        with self.SessionLocal() as db:
            try:
                credentials.register(db, payload.email, payload.password, rounds=self.rounds)
            except DuplicateEmail as e:
                log.warning("Registration rejected: duplicate email")
                return redirect("/register", e.message, request)
            except AppError:
                return redirect("/register", "Registration failed. Please try again.", request)

        return redirect("/login", "Successfully registered! You can now log in.", request)


class LoginAPI:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        api_key: str = "",
        rounds: int = credentials.DEFAULT_ROUNDS,
    ) -> None:
        self.SessionLocal = session_factory
        self.api_key = api_key
        self.rounds = rounds

    def __call__(self, request: Request, email: str = Form(""), password: str = Form("")):
        try:
            payload = LoginIn(email=email, password=password)
        except PydanticValidationError:
            return render(request, "login.html", {"message": "Please enter your email and password."}, 400)

        with self.SessionLocal() as db:
            try:
                user = credentials.verify(db, payload.email, payload.password, rounds=self.rounds)
            except InvalidCredentials as e:
                # Same message whether the account is missing or the password is wrong
                log.warning("Failed login attempt")
                return render(request, "login.html", {"message": e.message}, e.status_code)
            except AppError as e:
                return render(request, "login.html", {"message": "Server error. Please try again."}, e.status_code)

            login_session(request, user, self.api_key)
            log.info("User id=%s logged in", user.id)
        return redirect("/dashboard")


def logout(request: Request, user: dict = Depends(current_user)):
    logout_session(request)
    log.info("User id=%s logged out", user["id"])
    return render(request, "logout.html", {"message": "Logged out successfully."})
