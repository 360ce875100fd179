from typing import Optional

from fastapi import Cookie, Request

from .config import SESSION_COOKIE
from .security import verify_token


def get_current_user(
    request: Request,
    token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> str:
    """Resolve the session cookie to a user id.

    Raises Unauthenticated before the route handler runs. The id is also
    left on ``request.state.user_id`` for anything downstream.
    """
    user_id = verify_token(token)
    request.state.user_id = user_id
    return user_id
