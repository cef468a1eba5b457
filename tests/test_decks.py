import pytest
from sqlalchemy import func, select

from conftest import make_user
from models import Flashcard
from services import cards, decks
from services.errors import NotFound, ValidationError


@pytest.fixture()
def other(db):
    return make_user(db, "mallory@example.com", "pw")


class TestCreate:
    def test_creates_one_blank_card(self, db, user):
        deck, card = decks.create(db, user.id, "Spanish")
        assert deck.title == "Spanish"
        assert deck.user_id == user.id

        rows = db.execute(select(Flashcard).where(Flashcard.deck_id == deck.id)).scalars().all()
        assert [c.id for c in rows] == [card.id]
        assert rows[0].question == ""
        assert rows[0].answer == ""

    def test_title_is_stripped(self, db, user):
        deck, _ = decks.create(db, user.id, "  German  ")
        assert deck.title == "German"

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_blank_title_rejected(self, db, user, title):
        with pytest.raises(ValidationError):
            decks.create(db, user.id, title)

    def test_overlong_title_rejected(self, db, user):
        with pytest.raises(ValidationError) as exc:
            decks.create(db, user.id, "x" * 256)
        assert exc.value.message == "Deck title must be at most 255 characters."
        assert decks.list_for_user(db, user.id) == []

    def test_title_at_limit_kept_whole(self, db, user):
        deck, _ = decks.create(db, user.id, "x" * 255)
        assert deck.title == "x" * 255


class TestList:
    def test_counts_and_order(self, db, user):
        first, _ = decks.create(db, user.id, "First")
        second, _ = decks.create(db, user.id, "Second")
        cards.add(db, second.id)
        cards.add(db, second.id)

        summaries = decks.list_for_user(db, user.id)
        assert [(s.id, s.title, s.card_count) for s in summaries] == [
            (second.id, "Second", 3),
            (first.id, "First", 1),
        ]

    def test_empty_deck_has_zero_count(self, db, user):
        deck, card = decks.create(db, user.id, "Empty")
        cards.delete_card(db, card.id, user.id)
        assert decks.list_for_user(db, user.id)[0].card_count == 0

    def test_only_own_decks(self, db, user, other):
        decks.create(db, user.id, "Mine")
        decks.create(db, other.id, "Theirs")
        assert [s.title for s in decks.list_for_user(db, user.id)] == ["Mine"]


class TestGet:
    def test_get_own(self, db, user):
        deck, _ = decks.create(db, user.id, "Mine")
        assert decks.get(db, deck.id, user.id).id == deck.id

    def test_other_users_deck_looks_missing(self, db, user, other):
        deck, _ = decks.create(db, other.id, "Theirs")
        with pytest.raises(NotFound) as owned_elsewhere:
            decks.get(db, deck.id, user.id)
        with pytest.raises(NotFound) as missing:
            decks.get(db, 9999, user.id)
        assert owned_elsewhere.value.message == missing.value.message


class TestDelete:
    def test_delete_removes_cards(self, db, user):
        deck, first = decks.create(db, user.id, "Doomed")
        second = cards.add(db, deck.id)

        decks.delete_deck(db, deck.id, user.id)

        with pytest.raises(NotFound):
            decks.get(db, deck.id, user.id)
        for card_id in (first.id, second.id):
            with pytest.raises(NotFound):
                cards.get(db, card_id, deck.id, user.id)
        assert db.execute(select(func.count(Flashcard.id))).scalar() == 0

    def test_delete_missing(self, db, user):
        with pytest.raises(NotFound):
            decks.delete_deck(db, 12345, user.id)

    def test_cannot_delete_other_users_deck(self, db, user, other):
        deck, card = decks.create(db, other.id, "Theirs")
        with pytest.raises(NotFound):
            decks.delete_deck(db, deck.id, user.id)

        db.expire_all()
        assert decks.get(db, deck.id, other.id).id == deck.id
        assert cards.get(db, card.id, deck.id, other.id).id == card.id


class TestStoreErrors:
    def test_driver_errors_become_store_error(self, db, user, monkeypatch):
        from sqlalchemy.exc import OperationalError
        from services.errors import StoreError

        def broken(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "execute", broken)
        with pytest.raises(StoreError):
            decks.list_for_user(db, user.id)

    def test_failed_create_leaves_no_deck(self, db, user, monkeypatch):
        from sqlalchemy.exc import OperationalError
        from services.errors import StoreError

        real_commit = db.commit

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(StoreError):
            decks.create(db, user.id, "Half made")

        monkeypatch.setattr(db, "commit", real_commit)
        assert decks.list_for_user(db, user.id) == []
        assert db.execute(select(func.count(Flashcard.id))).scalar() == 0
