"""End-to-end tests driving the ASGI app with in-memory stores."""

from __future__ import annotations

import json
import re
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from best_goats.exceptions import StoreError
from best_goats.kv import InMemoryKeyValueStore
from best_goats.services.favorites_service import encode_favorites

_SESSION_COOKIE_PATTERN = re.compile(r"user_id=([A-Za-z0-9]+)")


def _session_token(response: httpx.Response) -> str | None:
    header = response.headers.get("set-cookie")
    if header is None:
        return None
    match = _SESSION_COOKIE_PATTERN.search(header)
    return match.group(1) if match else None


def _cookie(token: str) -> dict[str, str]:
    return {"cookie": f"user_id={token}"}


@pytest.mark.asyncio
async def test_add_favorite_without_cookie_issues_token_and_favorites_show_it(
    client: AsyncClient, favorites_store: InMemoryKeyValueStore
) -> None:
    response = await client.post("/add-favorite", data={"id": "7"})

    assert response.status_code == 302
    assert response.headers["location"] == "http://testserver/add-favorite"
    token = _session_token(response)
    assert token is not None and len(token) == 30
    set_cookie = response.headers["set-cookie"]
    assert "HttpOnly" in set_cookie and "Secure" in set_cookie
    assert json.loads(favorites_store.snapshot()[token]) == [7]

    page = await client.get("/favorites", headers=_cookie(token))

    assert page.status_code == 200
    assert "Nanny" in page.text
    assert 'value="7"' in page.text
    assert "Remove from favorites" in page.text
    assert "Billy" not in page.text


@pytest.mark.asyncio
async def test_redirect_prefers_referer(client: AsyncClient) -> None:
    response = await client.post(
        "/add-favorite",
        data={"id": "3"},
        headers={"referer": "http://testserver/favorites"},
    )

    assert response.status_code == 302
    assert response.headers["location"] == "http://testserver/favorites"


@pytest.mark.asyncio
async def test_home_marks_favorites_and_lists_everything(
    client: AsyncClient, favorites_store: InMemoryKeyValueStore
) -> None:
    await favorites_store.put("tok", encode_favorites([12]))

    response = await client.get("/", headers=_cookie("tok"))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    for name in ("Billy", "Nanny", "Kid", "Buck"):
        assert name in response.text
    assert "Favorites (1)" in response.text
    assert response.text.count("Remove from favorites") == 1


@pytest.mark.asyncio
async def test_adding_existing_favorite_keeps_cookie_and_store(
    client: AsyncClient, favorites_store: InMemoryKeyValueStore
) -> None:
    await favorites_store.put("tok", encode_favorites([7]))
    before = favorites_store.snapshot()

    response = await client.post("/add-favorite", data={"id": "7"}, headers=_cookie("tok"))

    assert response.status_code == 302
    assert "set-cookie" not in response.headers
    assert favorites_store.snapshot() == before


@pytest.mark.asyncio
async def test_remove_favorite_rotates_and_retires_old_entry(
    client: AsyncClient, favorites_store: InMemoryKeyValueStore
) -> None:
    await favorites_store.put("old", encode_favorites([1, 7, 3]))

    response = await client.post("/remove-favorite", data={"id": "7"}, headers=_cookie("old"))

    token = _session_token(response)
    assert response.status_code == 302
    assert token is not None and token != "old"
    assert favorites_store.snapshot() == {token: b"[1,3]"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"id": "abc"}, "Invalid id parameter"),
        ({"id": "-1"}, "Invalid id parameter"),
        ({"id": "4294967296"}, "Invalid id parameter"),
        ({"id": ""}, "Invalid id parameter"),
        ({}, "Missing id parameter"),
    ],
)
async def test_bad_id_renders_400_page(
    client: AsyncClient,
    favorites_store: InMemoryKeyValueStore,
    data: dict[str, str],
    message: str,
) -> None:
    response = await client.post("/add-favorite", data=data)

    assert response.status_code == 400
    assert message in response.text
    assert "set-cookie" not in response.headers
    assert favorites_store.snapshot() == {}


@pytest.mark.asyncio
async def test_unknown_path_is_404(client: AsyncClient) -> None:
    response = await client.get("/unknown-path")

    assert response.status_code == 404
    assert "404 Not Found" in response.text
    assert response.headers["x-request-id"]


@pytest.mark.asyncio
async def test_wrong_method_is_405(client: AsyncClient) -> None:
    response = await client.post("/")

    assert response.status_code == 405
    assert response.headers["allow"] == "GET"
    assert "405 Method Not Allowed" in response.text


@pytest.mark.asyncio
async def test_routing_ignores_case(client: AsyncClient) -> None:
    response = await client.get("/FAVORITES")

    assert response.status_code == 200
    assert "You haven't favorited anything yet." in response.text


@pytest.mark.asyncio
async def test_failed_write_is_500_without_new_cookie(app: FastAPI, client: AsyncClient) -> None:
    store = AsyncMock()
    store.get.return_value = b"[2]"
    store.put.side_effect = StoreError()
    app.state.favorites_store = store

    response = await client.post("/add-favorite", data={"id": "4"}, headers=_cookie("tok"))

    assert response.status_code == 500
    assert "Error updating favorites" in response.text
    assert "set-cookie" not in response.headers
    store.delete.assert_not_called()


@pytest.mark.asyncio
async def test_failed_cleanup_does_not_fail_the_request(
    app: FastAPI, client: AsyncClient
) -> None:
    store = AsyncMock()
    store.get.return_value = b"[2]"
    store.delete.side_effect = StoreError()
    app.state.favorites_store = store

    response = await client.post("/add-favorite", data={"id": "4"}, headers=_cookie("tok"))

    assert response.status_code == 302
    assert _session_token(response) is not None
    store.delete.assert_awaited_once_with("tok")


@pytest.mark.asyncio
async def test_favorites_read_failure_is_500(app: FastAPI, client: AsyncClient) -> None:
    store = AsyncMock()
    store.get.side_effect = StoreError()
    app.state.favorites_store = store

    response = await client.get("/", headers=_cookie("tok"))

    assert response.status_code == 500
    assert "Error communicating with the data store" in response.text


@pytest.mark.asyncio
async def test_missing_catalog_still_renders_error_page(
    app: FastAPI, client: AsyncClient
) -> None:
    app.state.catalog_store = InMemoryKeyValueStore()

    response = await client.get("/")

    assert response.status_code == 500
    assert "Couldn&#39;t load the catalog from the data store" in response.text


@pytest.mark.asyncio
async def test_image_proxy_forwards_path_verbatim(app: FastAPI, client: AsyncClient) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=b"JPEGDATA", headers={"content-type": "image/jpeg"})

    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    response = await client.get("/images/Big/Goat.JPG")

    assert response.status_code == 200
    assert response.content == b"JPEGDATA"
    assert response.headers["content-type"] == "image/jpeg"
    assert seen == ["https://images.example.test/bucket/images/Big/Goat.JPG"]


@pytest.mark.asyncio
async def test_image_proxy_failure_is_500(app: FastAPI, client: AsyncClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    response = await client.get("/images/goat.jpg")

    assert response.status_code == 500
    assert "Error fetching image" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("request_path", "upstream"),
    [
        ("/images/a%3Fb.jpg", "https://images.example.test/bucket/images/a%3Fb.jpg"),
        ("/images/a%23b.jpg", "https://images.example.test/bucket/images/a%23b.jpg"),
        ("/IMAGES/Dir/a%3Fb.jpg", "https://images.example.test/bucket/images/Dir/a%3Fb.jpg"),
        ("/images", "https://images.example.test/bucket/images"),
    ],
)
async def test_image_proxy_keeps_percent_encoding(
    app: FastAPI, client: AsyncClient, request_path: str, upstream: str
) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=b"IMG")

    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    response = await client.get(request_path)

    assert response.status_code == 200
    assert seen == [upstream]


@pytest.mark.asyncio
async def test_unexpected_error_page_keeps_request_id(app: FastAPI, client: AsyncClient) -> None:
    store = AsyncMock()
    store.get.side_effect = RuntimeError("boom")
    app.state.catalog_store = store

    response = await client.get("/")

    request_id = response.headers["x-request-id"]
    assert response.status_code == 500
    assert f"Request ID: {request_id}" in response.text
