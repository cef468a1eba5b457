# backend/app.py
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.middleware.sessions import SessionMiddleware

from config import Settings, configure_logging, load_settings
from models import init_models
from services.errors import ApiAuthRequired, AppError, AuthRequired

from apis.rendering import BASE_DIR, _fail, fail_response, redirect
from apis.auth_api import RegisterAPI, LoginAPI, home, login_page, register_page, logout
from apis.deck_api import (
    set_session_factory_for_decks,
    dashboard,
    create_deck,
    delete_deck,
    edit_deck,
    list_decks_api,
)
from apis.card_api import (
    set_session_factory_for_cards,
    edit_card,
    add_card,
    save_card,
    delete_card,
)
from apis.study_api import set_session_factory_for_study, study_deck, study_deck_api

log = logging.getLogger(__name__)


def make_engine(database_url: str):
    kwargs = {"future": True, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every pool checkout sees an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def _register_error_handlers(app: FastAPI) -> None:
    async def auth_required(request: Request, exc: AuthRequired):
        if isinstance(exc, ApiAuthRequired):
            return fail_response(exc)
        return redirect("/login", exc.message, request)

    async def app_error(request: Request, exc: AppError):
        return fail_response(exc)

    async def bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse(_fail("Invalid request.", 400), status_code=400)

    async def unexpected(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(_fail("Unexpected server error.", 500), status_code=500)

    app.add_exception_handler(AuthRequired, auth_required)
    app.add_exception_handler(AppError, app_error)
    app.add_exception_handler(RequestValidationError, bad_request)
    app.add_exception_handler(Exception, unexpected)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    # --- DB connection lives ONLY here ---
    engine = make_engine(settings.database_url)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

    # create tables once
    init_models(engine)

    app = FastAPI(title="Flashcards")
    app.state.engine = engine
    app.state.SessionLocal = SessionLocal
    app.state.settings = settings

    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    _register_error_handlers(app)

    # Provide DB session to route modules
    set_session_factory_for_decks(SessionLocal)
    set_session_factory_for_cards(SessionLocal)
    set_session_factory_for_study(SessionLocal)

    # Public pages + auth (class-callables hold their own session factory)
    app.add_api_route("/",         home,          methods=["GET"])
    app.add_api_route("/login",    login_page,    methods=["GET"])
    app.add_api_route("/register", register_page, methods=["GET"])
    app.add_api_route("/register", RegisterAPI(SessionLocal, settings.bcrypt_rounds), methods=["POST"])
    app.add_api_route("/login",    LoginAPI(SessionLocal, settings.api_key, settings.bcrypt_rounds), methods=["POST"])
    app.add_api_route("/logout",   logout,        methods=["GET"])

    # Decks
    app.add_api_route("/dashboard",                 dashboard,   methods=["GET"])
    app.add_api_route("/decks/create",              create_deck, methods=["POST"])
    app.add_api_route("/decks/delete/{deck_id}",    delete_deck, methods=["POST"])
    app.add_api_route("/decks/edit/{deck_id}",      edit_deck,   methods=["GET"])

    # Cards
    app.add_api_route("/decks/edit/{deck_id}/card/{card_id}", edit_card,   methods=["GET"])
    app.add_api_route("/decks/{deck_id}/cards/add",           add_card,    methods=["POST"])
    app.add_api_route("/cards/save/{card_id}",                save_card,   methods=["POST"])
    app.add_api_route("/cards/delete/{card_id}",              delete_card, methods=["POST"])

    # Study
    app.add_api_route("/decks/study/{deck_id}", study_deck, methods=["GET"])

    # JSON data routes
    app.add_api_route("/api/decks",                 list_decks_api, methods=["GET"])
    app.add_api_route("/api/decks/{deck_id}/study", study_deck_api, methods=["GET"])

    log.info("Flashcards app ready (database=%s)", engine.url.render_as_string(hide_password=True))
    return app


if __name__ == "__main__":
    uvicorn.run("app:create_app", factory=True, host="127.0.0.1", port=8000, reload=True)
