import pytest

from life_kanban.credentials import CredentialStore
from life_kanban.errors import NotFound, ValidationError
from life_kanban.models import CardChanges, CardStatus
from life_kanban.storage import CardRepository


@pytest.fixture
def users(db):
    store = CredentialStore(db)
    alice = store.register("alice@x.com", "password1")
    bob = store.register("bob@x.com", "password1")
    return alice.id, bob.id


@pytest.fixture
def repo(db):
    return CardRepository(db)


def test_create_defaults_to_inbox(repo, users):
    alice, _ = users
    card = repo.create(alice, "Buy milk")
    assert card.status == CardStatus.INBOX
    assert card.owner_id == alice
    assert card.notes is None
    assert card.tag is None
    assert card.created_at == card.updated_at


@pytest.mark.parametrize("title", ["x" * 120, "x"])
def test_title_bounds_accepted(repo, users, title):
    assert repo.create(users[0], title).title == title


@pytest.mark.parametrize("title", ["", "x" * 121, None])
def test_title_bounds_rejected(repo, users, title):
    with pytest.raises(ValidationError):
        repo.create(users[0], title)


def test_notes_and_tag_bounds(repo, users):
    alice, _ = users
    card = repo.create(alice, "t", notes="n" * 2000, tag="g" * 40)
    assert len(card.notes) == 2000
    with pytest.raises(ValidationError):
        repo.create(alice, "t", notes="n" * 2001)
    with pytest.raises(ValidationError):
        repo.create(alice, "t", tag="g" * 41)


def test_list_is_scoped_and_newest_first(repo, users):
    alice, bob = users
    first = repo.create(alice, "first")
    second = repo.create(alice, "second")
    repo.create(bob, "not yours")

    assert [c.id for c in repo.list(alice)] == [second.id, first.id]
    assert [c.title for c in repo.list(bob)] == ["not yours"]


def test_update_partial_fields(repo, users):
    alice, _ = users
    card = repo.create(alice, "title", notes="keep me", tag="home")
    created_at, updated_at = card.created_at, card.updated_at

    updated = repo.update(alice, card.id, CardChanges(status="TODAY", tag=None))
    assert updated.status == CardStatus.TODAY
    assert updated.tag is None
    assert updated.notes == "keep me"
    assert updated.title == "title"
    assert updated.created_at == created_at
    assert updated.updated_at > updated_at


@pytest.mark.parametrize(
    "changes",
    [
        CardChanges(title=""),
        CardChanges(title="x" * 121),
        CardChanges(title=None),
        CardChanges(notes="n" * 2001),
        CardChanges(tag="g" * 41),
        CardChanges(status="ARCHIVED"),
        CardChanges(status=None),
    ],
)
def test_update_revalidates(repo, users, changes):
    alice, _ = users
    card = repo.create(alice, "title")
    with pytest.raises(ValidationError):
        repo.update(alice, card.id, changes)
    assert repo.get(alice, card.id).title == "title"


def test_other_user_cannot_touch_card(repo, users):
    alice, bob = users
    card = repo.create(alice, "private")

    with pytest.raises(NotFound):
        repo.get(bob, card.id)
    with pytest.raises(NotFound):
        repo.update(bob, card.id, CardChanges(title="mine now"))
    with pytest.raises(NotFound):
        repo.delete(bob, card.id)

    still = repo.get(alice, card.id)
    assert still.title == "private"
    assert still.owner_id == alice


def test_delete_twice_is_not_found_both_times(repo, users):
    alice, _ = users
    card_id = repo.create(alice, "gone soon").id
    repo.delete(alice, card_id)
    with pytest.raises(NotFound):
        repo.delete(alice, card_id)
    with pytest.raises(NotFound):
        repo.delete(alice, "never-existed")
    assert repo.list(alice) == []


def test_update_missing_card(repo, users):
    with pytest.raises(NotFound):
        repo.update(users[0], "never-existed", CardChanges(status=CardStatus.DONE))


def test_changes_present_skips_unset():
    assert CardChanges().present() == {}
    assert CardChanges(notes=None, status="DONE").present() == {"notes": None, "status": "DONE"}
