# backend/apis/deck_api.py
import logging
from typing import Callable, Optional

from fastapi import Depends, Form, Path, Query, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from schemas import DeckCreateIn, DeckOut
from services import cards, decks
from services.errors import AppError, ValidationError
from .rendering import MAX_ID, _success, fail_response, pop_flash, redirect, render
from .session_gate import current_api_user, current_user

log = logging.getLogger(__name__)

_SESSION_FACTORY: Optional[Callable[[], Session]] = None

def set_session_factory_for_decks(factory: Callable[[], Session]) -> None:
    global _SESSION_FACTORY
    _SESSION_FACTORY = factory


# ---------------- GET: /dashboard ----------------
def dashboard(
    request: Request,
    new_deck: bool = Query(default=False, alias="newDeck"),
    user: dict = Depends(current_user),
):
    message = pop_flash(request)
    with _SESSION_FACTORY() as db:
        try:
            summaries = decks.list_for_user(db, user["id"])
        except AppError:
            return render(request, "dashboard.html", {
                "decks": [],
                "error": "Error loading decks. Please try again.",
                "newDeck": False,
                "message": message,
            })

    return render(request, "dashboard.html", {
        "decks": [s._asdict() for s in summaries],
        "newDeck": new_deck,
        "message": message,
    })


# ---------------- POST: /decks/create ----------------
def create_deck(request: Request, title: str = Form(""), user: dict = Depends(current_user)):
    try:
        payload = DeckCreateIn(title=title)
    except PydanticValidationError as e:
        if any(err["type"] == "string_too_long" for err in e.errors()):
            msg = f"Deck title must be at most {decks.TITLE_MAX_LENGTH} characters."
        else:
            msg = "Deck title is required."
        return fail_response(ValidationError(msg))

    with _SESSION_FACTORY() as db:
        try:
            deck, card = decks.create(db, user["id"], payload.title)
        except AppError as e:
            return fail_response(e)

    return redirect(f"/decks/edit/{deck.id}/card/{card.id}")


# ---------------- POST: /decks/delete/{deck_id} ----------------
def delete_deck(deck_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_user)):
    with _SESSION_FACTORY() as db:
        try:
            decks.delete_deck(db, deck_id, user["id"])
        except AppError as e:
            return fail_response(e)
    return redirect("/dashboard")


# ---------------- GET: /decks/edit/{deck_id} ----------------
def edit_deck(deck_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_user)):
    """Jump to the most recent card of a deck; an empty deck gets a blank card first."""
    with _SESSION_FACTORY() as db:
        try:
            decks.get(db, deck_id, user["id"])
            card = cards.latest_in_deck(db, deck_id)
            if card is None:
                log.info("Deck id=%s is empty, creating a blank card", deck_id)
                card = cards.add(db, deck_id)
        except AppError as e:
            return fail_response(e)

    return redirect(f"/decks/edit/{deck_id}/card/{card.id}")


# ---------------- GET: /api/decks ----------------
def list_decks_api(user: dict = Depends(current_api_user)):
    with _SESSION_FACTORY() as db:
        try:
            summaries = decks.list_for_user(db, user["id"])
        except AppError as e:
            return fail_response(e)

    payload = [DeckOut(**s._asdict()).model_dump() for s in summaries]
    return _success(payload, message=f"Fetched {len(payload)} deck(s).")
