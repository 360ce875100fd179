import httpx
import pytest

from life_kanban.client import BOARD, LOGIN, ApiError, BoardCache, KanbanClient, bootstrap, error_message


@pytest.fixture
def api(make_client):
    return KanbanClient(http=make_client())


def test_bootstrap_routes_by_session(api):
    assert bootstrap(api) == LOGIN

    api.register("a@x.com", "password1")
    assert bootstrap(api) == LOGIN

    assert api.login("a@x.com", "password1")["email"] == "a@x.com"
    assert bootstrap(api) == BOARD

    api.logout()
    assert bootstrap(api) == LOGIN


def test_api_errors_carry_server_message(api):
    api.register("a@x.com", "password1")
    with pytest.raises(ApiError) as excinfo:
        api.register("a@x.com", "password1")
    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "Email already in use"

    with pytest.raises(ApiError) as excinfo:
        api.login("a@x.com", "nope-nope")
    assert excinfo.value.status_code == 401
    assert str(excinfo.value) == "Invalid credentials"


def test_error_message_falls_back_to_status():
    assert error_message(httpx.Response(502, text="Bad Gateway")) == "Request failed: 502"
    assert error_message(httpx.Response(500, json={"detail": "x"})) == "Request failed: 500"
    assert error_message(httpx.Response(404, json={"error": "Not found"})) == "Not found"


def test_bootstrap_reraises_other_failures():
    def handler(request):
        return httpx.Response(503)

    api = KanbanClient(http=httpx.Client(base_url="http://kanban", transport=httpx.MockTransport(handler)))
    with pytest.raises(ApiError) as excinfo:
        bootstrap(api)
    assert excinfo.value.status_code == 503


def test_board_cache_follows_mutations(api):
    api.register("a@x.com", "password1")
    api.login("a@x.com", "password1")
    cache = BoardCache(api)
    cache.refresh()
    assert cache.columns() == {"INBOX": [], "TODAY": [], "WAITING": [], "DONE": []}

    first = cache.add("first")
    second = cache.add("second", notes="details", tag="work")
    assert [c["id"] for c in cache.columns()["INBOX"]] == [second["id"], first["id"]]

    moved = cache.move(first["id"], "WAITING")
    assert moved["status"] == "WAITING"
    assert cache.cards[first["id"]] == moved
    assert [c["id"] for c in cache.columns()["WAITING"]] == [first["id"]]

    cache.delete(second["id"])
    assert second["id"] not in cache.cards
    assert cache.columns()["INBOX"] == []

    fresh = BoardCache(api)
    fresh.refresh()
    assert fresh.cards == cache.cards


def test_update_card_sends_only_given_fields(api):
    api.register("a@x.com", "password1")
    api.login("a@x.com", "password1")
    card = api.create_card("t", notes="n", tag="g")
    updated = api.update_card(card["id"], tag=None)
    assert updated["tag"] is None
    assert updated["notes"] == "n"
    assert api.list_cards() == [updated]
