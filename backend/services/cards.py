# backend/services/cards.py
import logging
import random
from typing import List, NamedTuple, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import Deck, Flashcard
from .errors import EmptyDeck, NotFound, translate_store_errors

log = logging.getLogger(__name__)


class Neighbors(NamedTuple):
    prev_id: Optional[int]
    next_id: Optional[int]


def _owned_card(card_id: int, user_id: int):
    return (
        select(Flashcard)
        .join(Deck, Flashcard.deck_id == Deck.id)
        .where(Flashcard.id == card_id, Deck.user_id == user_id)
    )


def add(db: Session, deck_id: int) -> Flashcard:
    """Insert a blank card. The caller has already checked deck ownership."""
    with translate_store_errors(db, "adding card"):
        card = Flashcard(deck_id=deck_id, question="", answer="")
        db.add(card)
        db.commit()
        db.refresh(card)
    return card


def get(db: Session, card_id: int, deck_id: int, user_id: int) -> Flashcard:
    with translate_store_errors(db, "fetching card"):
        card = db.execute(
            _owned_card(card_id, user_id).where(Flashcard.deck_id == deck_id)
        ).scalar_one_or_none()
    if card is None:
        raise NotFound("Card not found.")
    return card


def latest_in_deck(db: Session, deck_id: int) -> Optional[Flashcard]:
    with translate_store_errors(db, "fetching latest card"):
        return db.execute(
            select(Flashcard)
            .where(Flashcard.deck_id == deck_id)
            .order_by(Flashcard.id.desc())
            .limit(1)
        ).scalar_one_or_none()


def neighbors(db: Session, deck_id: int, card_id: int) -> Neighbors:
    """Previous/next card ids within a deck, ordered by id."""
    with translate_store_errors(db, "fetching neighbors"):
        next_id = db.execute(
            select(func.min(Flashcard.id)).where(Flashcard.deck_id == deck_id, Flashcard.id > card_id)
        ).scalar()
        prev_id = db.execute(
            select(func.max(Flashcard.id)).where(Flashcard.deck_id == deck_id, Flashcard.id < card_id)
        ).scalar()
    return Neighbors(prev_id=prev_id, next_id=next_id)


def save(db: Session, card_id: int, user_id: int, question: Optional[str], answer: Optional[str]) -> Flashcard:
    with translate_store_errors(db, "saving card"):
        card = db.execute(_owned_card(card_id, user_id)).scalar_one_or_none()
        if card is None:
            raise NotFound("Card not found.")
        card.question = question if question is not None else ""
        card.answer = answer if answer is not None else ""
        db.commit()
        db.refresh(card)
    return card


def delete_card(db: Session, card_id: int, user_id: int) -> int:
    """Delete an owned card and return its deck id. The deck may be left empty."""
    with translate_store_errors(db, "deleting card"):
        card = db.execute(_owned_card(card_id, user_id)).scalar_one_or_none()
        if card is None:
            raise NotFound("Card not found.")
        deck_id = card.deck_id
        db.delete(card)
        db.commit()

    log.info("Deleted card id=%s from deck id=%s", card_id, deck_id)
    return deck_id


def study_order(cards: List[Flashcard], rng: Optional[random.Random] = None) -> List[Flashcard]:
    """Return a uniformly random permutation of `cards` (Fisher-Yates)."""
    shuffled = list(cards)
    (rng or random).shuffle(shuffled)
    return shuffled


def list_for_study(db: Session, deck_id: int, user_id: int, rng: Optional[random.Random] = None) -> List[Flashcard]:
    with translate_store_errors(db, "loading study cards"):
        deck = db.execute(
            select(Deck.id).where(Deck.id == deck_id, Deck.user_id == user_id)
        ).scalar_one_or_none()
        if deck is None:
            raise NotFound("Deck not found.")
        cards = db.execute(
            select(Flashcard).where(Flashcard.deck_id == deck_id)
        ).scalars().all()

    if not cards:
        raise EmptyDeck("This deck has no cards to study yet.")
    return study_order(cards, rng)
