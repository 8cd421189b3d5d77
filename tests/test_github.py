from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from cashflow_dashboard.integration.github import GitHubProvider, parse_release

RELEASE_PAYLOAD = {
    "name": "v0.6.0",
    "tag_name": "v0.6.0",
    "published_at": "2024-05-01T12:30:00Z",
    "body": "## Highlights",
    "body_html": "<h2>Highlights</h2>",
    "author": {"login": "octocat", "avatar_url": "https://avatars.example/octocat.png"},
}


def _response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


@pytest.mark.anyio
async def test_fetch_latest_release_notes() -> None:
    provider = GitHubProvider(repo="owner/repo", token="secret-token")

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.is_closed = False
        mock_client.get = AsyncMock(return_value=_response(RELEASE_PAYLOAD))
        mock_client_cls.return_value = mock_client

        notes = await provider.fetch_latest_release_notes()

    assert notes is not None
    assert notes.name == "v0.6.0"
    assert notes.username == "octocat"
    assert notes.avatar == "https://avatars.example/octocat.png"
    assert notes.published_at == date(2024, 5, 1)
    assert notes.body == "<h2>Highlights</h2>"

    args, kwargs = mock_client.get.call_args
    assert args[0] == "https://api.github.com/repos/owner/repo/releases/latest"
    assert kwargs["headers"]["Authorization"] == "Bearer secret-token"
    assert kwargs["headers"]["Accept"] == "application/vnd.github.html+json"


@pytest.mark.anyio
async def test_fetch_returns_none_on_http_error() -> None:
    mock_client = AsyncMock()
    mock_client.is_closed = False
    response = MagicMock()
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "not found",
        request=httpx.Request("GET", "https://api.github.com"),
        response=httpx.Response(404),
    )
    mock_client.get = AsyncMock(return_value=response)
    provider = GitHubProvider(repo="owner/repo", client=mock_client)

    assert await provider.fetch_latest_release_notes() is None


@pytest.mark.anyio
async def test_fetch_returns_none_on_network_error() -> None:
    mock_client = AsyncMock()
    mock_client.is_closed = False
    mock_client.get = AsyncMock(side_effect=httpx.ConnectError("offline"))
    provider = GitHubProvider(repo="owner/repo", client=mock_client)

    assert await provider.fetch_latest_release_notes() is None


def test_no_authorization_header_without_token() -> None:
    provider = GitHubProvider(repo="owner/repo")

    assert "Authorization" not in provider.headers
    assert provider.releases_url == "https://github.com/owner/repo/releases"


def test_parse_release_falls_back_to_tag_and_markdown_body() -> None:
    payload = {
        "tag_name": "v1.0.0",
        "published_at": "2024-01-02T00:00:00Z",
        "body": "plain body",
        "author": None,
    }

    notes = parse_release(payload)

    assert notes is not None
    assert notes.name == "v1.0.0"
    assert notes.body == "plain body"
    assert notes.username == ""


@pytest.mark.parametrize("payload", [None, [], {"name": "x"}, {"published_at": "not-a-date"}])
def test_parse_release_rejects_bad_payloads(payload) -> None:
    assert parse_release(payload) is None


def test_parse_release_ignores_non_mapping_author() -> None:
    payload = dict(RELEASE_PAYLOAD, author="octocat")

    notes = parse_release(payload)

    assert notes is not None
    assert notes.username == ""
    assert notes.avatar == ""
    assert notes.name == "v0.6.0"


@pytest.mark.anyio
async def test_fetch_with_non_mapping_author_does_not_raise() -> None:
    mock_client = AsyncMock()
    mock_client.is_closed = False
    mock_client.get = AsyncMock(return_value=_response(dict(RELEASE_PAYLOAD, author=["octocat"])))
    provider = GitHubProvider(repo="owner/repo", client=mock_client)

    notes = await provider.fetch_latest_release_notes()

    assert notes is not None
    assert notes.body == "<h2>Highlights</h2>"
