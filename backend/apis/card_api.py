# backend/apis/card_api.py
import logging
from typing import Callable, Optional

from fastapi import Depends, Form, Path, Request
from sqlalchemy.orm import Session

from schemas import CardSaveIn
from services import cards, decks
from services.errors import AppError
from .rendering import MAX_ID, fail_response, pop_flash, redirect, render
from .session_gate import current_user

log = logging.getLogger(__name__)

_SESSION_FACTORY: Optional[Callable[[], Session]] = None

def set_session_factory_for_cards(factory: Callable[[], Session]) -> None:
    global _SESSION_FACTORY
    _SESSION_FACTORY = factory


# ---------------- GET: /decks/edit/{deck_id}/card/{card_id} ----------------
def edit_card(
    request: Request,
    deck_id: int = Path(ge=1, le=MAX_ID),
    card_id: int = Path(ge=1, le=MAX_ID),
    user: dict = Depends(current_user),
):
    with _SESSION_FACTORY() as db:
        try:
            deck = decks.get(db, deck_id, user["id"])
            card = cards.get(db, card_id, deck_id, user["id"])
            nav = cards.neighbors(db, deck_id, card_id)
        except AppError as e:
            return fail_response(e)

        return render(request, "edit_deck.html", {
            "deck": {"id": deck.id, "title": deck.title},
            "card": card.as_dict(),
            "nextCardId": nav.next_id,
            "prevCardId": nav.prev_id,
            "message": pop_flash(request),
        })


# ---------------- POST: /decks/{deck_id}/cards/add ----------------
def add_card(request: Request, deck_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_user)):
    with _SESSION_FACTORY() as db:
        try:
            decks.get(db, deck_id, user["id"])
            card = cards.add(db, deck_id)
        except AppError as e:
            log.warning("Could not add card to deck id=%s: %s", deck_id, e.message)
            return redirect(f"/decks/edit/{deck_id}", "Error adding card. Please try again.", request)

    return redirect(f"/decks/edit/{deck_id}/card/{card.id}")


# ---------------- POST: /cards/save/{card_id} ----------------
def save_card(
    request: Request,
    card_id: int = Path(ge=1, le=MAX_ID),
    question: Optional[str] = Form(None),
    answer: Optional[str] = Form(None),
    user: dict = Depends(current_user),
):
    payload = CardSaveIn(question=question, answer=answer)

    with _SESSION_FACTORY() as db:
        try:
            card = cards.save(db, card_id, user["id"], payload.question, payload.answer)
        except AppError as e:
            # re-render with the submitted values
            return render(request, "edit_deck.html", {
                "error": "Error saving card. Please try again." if e.status_code >= 500 else e.message,
                "card": {"id": card_id, "question": payload.question, "answer": payload.answer, "deck_id": None},
                "deck": None,
                "nextCardId": None,
                "prevCardId": None,
            }, e.status_code)
        deck_id = card.deck_id

    return redirect(f"/decks/edit/{deck_id}/card/{card_id}")


# ---------------- POST: /cards/delete/{card_id} ----------------
def delete_card(card_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_user)):
    with _SESSION_FACTORY() as db:
        try:
            deck_id = cards.delete_card(db, card_id, user["id"])
        except AppError as e:
            return fail_response(e)

    return redirect(f"/decks/edit/{deck_id}")
