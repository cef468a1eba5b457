# backend/services/decks.py
import logging
from typing import List, NamedTuple, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from models import Deck, Flashcard
from .errors import NotFound, ValidationError, translate_store_errors

log = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


class DeckSummary(NamedTuple):
    id: int
    title: str
    card_count: int


def list_for_user(db: Session, user_id: int) -> List[DeckSummary]:
    stmt = (
        select(Deck.id, Deck.title, func.count(Flashcard.id).label("card_count"))
        .outerjoin(Flashcard, Flashcard.deck_id == Deck.id)
        .where(Deck.user_id == user_id)
        .group_by(Deck.id, Deck.title)
        .order_by(Deck.id.desc())
    )
    with translate_store_errors(db, "listing decks"):
        rows = db.execute(stmt).all()
    return [DeckSummary(r.id, r.title, int(r.card_count or 0)) for r in rows]


def create(db: Session, user_id: int, title: str) -> Tuple[Deck, Flashcard]:
    """Insert a deck and its first blank card in one transaction."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Deck title is required.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Deck title must be at most {TITLE_MAX_LENGTH} characters.")

    with translate_store_errors(db, "creating deck"):
        deck = Deck(title=title, user_id=user_id)
        db.add(deck)
        db.flush()
        card = Flashcard(deck_id=deck.id, question="", answer="")
        db.add(card)
        db.commit()
        db.refresh(deck)
        db.refresh(card)

    log.info("Created deck id=%s for user id=%s", deck.id, user_id)
    return deck, card


def get(db: Session, deck_id: int, user_id: int) -> Deck:
    with translate_store_errors(db, "fetching deck"):
        deck = db.execute(
            select(Deck).where(Deck.id == deck_id, Deck.user_id == user_id)
        ).scalar_one_or_none()
    if deck is None:
        raise NotFound("Deck not found.")
    return deck


def delete_deck(db: Session, deck_id: int, user_id: int) -> None:
    owned = select(Deck.id).where(Deck.id == deck_id, Deck.user_id == user_id)
    with translate_store_errors(db, "deleting deck"):
        db.execute(
            delete(Flashcard)
            .where(Flashcard.deck_id.in_(owned))
            .execution_options(synchronize_session=False)
        )
        result = db.execute(
            delete(Deck)
            .where(Deck.id == deck_id, Deck.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound("Deck not found.")
        db.commit()

    log.info("Deleted deck id=%s for user id=%s", deck_id, user_id)
