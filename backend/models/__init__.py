from .db_model import Base, User, Deck, Flashcard, init_models

__all__ = ["Base", "User", "Deck", "Flashcard", "init_models"]
