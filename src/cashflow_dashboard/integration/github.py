import asyncio
from datetime import datetime
from typing import Any

import httpx

from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import ReleaseNotes

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
HTML_MEDIA_TYPE = "application/vnd.github.html+json"


class GitHubProvider:
    def __init__(
        self,
        repo: str,
        api_url: str = DEFAULT_API_URL,
        token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Accept": HTML_MEDIA_TYPE,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._client = client
        self._client_lock = asyncio.Lock()

    @property
    def releases_url(self) -> str:
        return f"https://github.com/{self.repo}/releases"

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            client = self._client
            if client is None or client.is_closed:
                client = httpx.AsyncClient()
                self._client = client
            return client

    async def fetch_latest_release_notes(self) -> ReleaseNotes | None:
        client = await self._get_client()
        url = f"{self.api_url}/repos/{self.repo}/releases/latest"
        try:
            response = await client.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            logger.error("[GITHUB] Error fetching latest release for %s: %s", self.repo, exc)
            return None

        notes = parse_release(payload)
        if notes is None:
            logger.warning("[GITHUB] Unexpected release payload for %s.", self.repo)
        return notes


def parse_release(payload: Any) -> ReleaseNotes | None:
    if not isinstance(payload, dict):
        return None
    author = payload.get("author")
    if not isinstance(author, dict):
        author = {}
    published_raw = payload.get("published_at") or payload.get("created_at")
    if not published_raw:
        return None
    try:
        published_at = datetime.fromisoformat(str(published_raw).replace("Z", "+00:00")).date()
    except ValueError:
        return None

    return ReleaseNotes(
        avatar=author.get("avatar_url") or "",
        username=author.get("login") or "",
        name=payload.get("name") or payload.get("tag_name") or "",
        published_at=published_at,
        body=payload.get("body_html") or payload.get("body") or "",
    )
