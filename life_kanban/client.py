"""HTTP client for the board API.

``KanbanClient`` talks to the API with a cookie jar so the session cookie set
at login rides along on every later call. ``bootstrap`` decides whether a
freshly started client should show the login screen or the board, and
``BoardCache`` mirrors the user's cards between calls, keyed by card id.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from .config import API_URL
from .models import STATUS_ORDER, UNSET

logger = logging.getLogger("life_kanban.client")

LOGIN = "login"
BOARD = "board"


class ApiError(Exception):
    """Any non-2xx answer from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return f"Request failed: {response.status_code}"


class KanbanClient:
    def __init__(self, base_url: str = API_URL, http: Optional[httpx.Client] = None) -> None:
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> KanbanClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(self, method: str, path: str, json: Any = None) -> Any:
        response = self.http.request(method, path, json=json)
        if not response.is_success:
            message = error_message(response)
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response.json()

    # === Session ===
    def register(self, email: str, password: str) -> Dict[str, Any]:
        return self.request("POST", "/auth/register", {"email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.request("POST", "/auth/login", {"email": email, "password": password})

    def logout(self) -> Dict[str, Any]:
        result = self.request("POST", "/auth/logout")
        self.http.cookies.clear()
        return result

    def me(self) -> Dict[str, Any]:
        return self.request("GET", "/me")

    # === Cards ===
    def list_cards(self) -> List[Dict[str, Any]]:
        return self.request("GET", "/cards")

    def create_card(self, title: str, notes: Optional[str] = None, tag: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title}
        if notes is not None:
            body["notes"] = notes
        if tag is not None:
            body["tag"] = tag
        return self.request("POST", "/cards", body)

    def update_card(self, card_id: str, title=UNSET, notes=UNSET, tag=UNSET, status=UNSET) -> Dict[str, Any]:
        fields = {"title": title, "notes": notes, "tag": tag, "status": status}
        body = {k: v for k, v in fields.items() if v is not UNSET}
        return self.request("PATCH", f"/cards/{card_id}", body)

    def delete_card(self, card_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/cards/{card_id}")


def bootstrap(client: KanbanClient) -> str:
    """Probe the session and return which view to open: ``"board"`` or ``"login"``."""
    try:
        client.me()
    except ApiError as exc:
        if exc.status_code == 401:
            return LOGIN
        raise
    return BOARD


class BoardCache:
    """Client-side copy of the user's cards.

    Every mutating API response is authoritative for the card it returns, so
    the cache only ever replaces or drops entries by id.
    """

    def __init__(self, client: KanbanClient) -> None:
        self.client = client
        self.cards: Dict[str, Dict[str, Any]] = {}

    def refresh(self) -> None:
        self.replace_all(self.client.list_cards())

    def replace_all(self, cards: List[Dict[str, Any]]) -> None:
        self.cards = {card["id"]: card for card in cards}

    def put(self, card: Dict[str, Any]) -> Dict[str, Any]:
        self.cards[card["id"]] = card
        return card

    def remove(self, card_id: str) -> None:
        self.cards.pop(card_id, None)

    def add(self, title: str, notes: Optional[str] = None, tag: Optional[str] = None) -> Dict[str, Any]:
        return self.put(self.client.create_card(title, notes, tag))

    def move(self, card_id: str, status: str) -> Dict[str, Any]:
        return self.put(self.client.update_card(card_id, status=status))

    def delete(self, card_id: str) -> None:
        self.client.delete_card(card_id)
        self.remove(card_id)

    def columns(self) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {status.value: [] for status in STATUS_ORDER}
        newest_first = sorted(self.cards.values(), key=lambda c: datetime.fromisoformat(c["createdAt"]), reverse=True)
        for card in newest_first:
            grouped[card["status"]].append(card)
        return grouped
