# backend/apis/study_api.py
import logging
from typing import Callable, Optional

from fastapi import Depends, Path, Request
from sqlalchemy.orm import Session

from schemas import CardOut
from services import cards, decks
from services.errors import AppError, EmptyDeck, NotFound
from .rendering import MAX_ID, _success, fail_response, redirect, render
from .session_gate import current_api_user, current_user

log = logging.getLogger(__name__)

_SESSION_FACTORY: Optional[Callable[[], Session]] = None

def set_session_factory_for_study(factory: Callable[[], Session]) -> None:
    global _SESSION_FACTORY
    _SESSION_FACTORY = factory


# ---------------- GET: /decks/study/{deck_id} ----------------
def study_deck(request: Request, deck_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_user)):
    """Render the deck's cards in a fresh random order; every failure goes back to the dashboard."""
    with _SESSION_FACTORY() as db:
        try:
            deck = decks.get(db, deck_id, user["id"])
            shuffled = cards.list_for_study(db, deck_id, user["id"])
        except EmptyDeck as e:
            return redirect("/dashboard", e.message, request)
        except NotFound:
            log.warning("Study requested for missing deck id=%s", deck_id)
            return redirect("/dashboard", "Deck not found.", request)
        except AppError:
            return redirect("/dashboard", "Error loading study mode.", request)

        return render(request, "study_mode.html", {
            "deck": {"id": deck.id, "title": deck.title},
            "cards": [c.as_dict() for c in shuffled],
        })


# ---------------- GET: /api/decks/{deck_id}/study ----------------
def study_deck_api(deck_id: int = Path(ge=1, le=MAX_ID), user: dict = Depends(current_api_user)):
    with _SESSION_FACTORY() as db:
        try:
            shuffled = cards.list_for_study(db, deck_id, user["id"])
        except AppError as e:
            return fail_response(e)

        payload = [CardOut(**c.as_dict()).model_dump() for c in shuffled]
    return _success(payload, message=f"Fetched {len(payload)} card(s) for deck_id={deck_id}.")
