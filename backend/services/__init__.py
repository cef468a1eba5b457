from . import cards, credentials, decks, errors

__all__ = ["cards", "credentials", "decks", "errors"]
