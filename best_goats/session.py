"""Anonymous session handling: reading the token cookie and issuing new ones.

The session token is not an identity, merely an opaque handle to one favorites
list.  It is rotated on every successful mutation, so the cookie written here
always points at the most recent state of the visitor's list.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Mapping

from starlette.responses import Response

from best_goats.settings import DEFAULT_SESSION_COOKIE_NAME, DEFAULT_SESSION_TOKEN_LENGTH

TOKEN_ALPHABET = string.ascii_letters + string.digits


def _parse_cookie_fragment(fragment: str) -> tuple[str, str] | None:
    """Split ``name=value``; return ``None`` when the fragment is malformed."""

    name, separator, value = fragment.partition("=")
    name = name.strip()
    if not separator or not name:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]
    return name, value


def parse_session_cookie(
    cookie_header: str | None, cookie_name: str = DEFAULT_SESSION_COOKIE_NAME
) -> str | None:
    """Return the value of the first ``cookie_name`` cookie in ``cookie_header``.

    Malformed fragments are skipped rather than failing the whole header, and
    an empty value is treated the same as a missing cookie.
    """

    if not cookie_header:
        return None
    for fragment in cookie_header.split(";"):
        parsed = _parse_cookie_fragment(fragment.strip())
        if parsed is None:
            continue
        name, value = parsed
        if name == cookie_name:
            return value or None
    return None


def get_session_token(
    headers: Mapping[str, str], cookie_name: str = DEFAULT_SESSION_COOKIE_NAME
) -> str | None:
    """Extract the session token from a request's header collection.

    ``headers`` must look names up case-insensitively, as Starlette's
    ``Headers`` does; a plain dict keyed ``"Cookie"`` is not found.
    """

    return parse_session_cookie(headers.get("cookie"), cookie_name)


def generate_session_token(length: int = DEFAULT_SESSION_TOKEN_LENGTH) -> str:
    """Return a fresh random alphanumeric token."""

    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def set_session_cookie(
    response: Response,
    token: str,
    *,
    cookie_name: str = DEFAULT_SESSION_COOKIE_NAME,
    max_age: int,
) -> None:
    """Attach the session cookie (HttpOnly, Secure, long-lived) to ``response``."""

    response.set_cookie(
        key=cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=True,
        samesite=None,
    )


__all__ = [
    "TOKEN_ALPHABET",
    "generate_session_token",
    "get_session_token",
    "parse_session_cookie",
    "set_session_cookie",
]
