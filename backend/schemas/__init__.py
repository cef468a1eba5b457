from .auth import RegisterIn, LoginIn
from .decks import DeckCreateIn, CardSaveIn, DeckOut, CardOut

__all__ = ["RegisterIn", "LoginIn", "DeckCreateIn", "CardSaveIn", "DeckOut", "CardOut"]
