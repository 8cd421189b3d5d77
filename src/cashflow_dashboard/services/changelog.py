from datetime import date

from cashflow_dashboard.integration.github import GitHubProvider
from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import ReleaseNotes

logger = get_logger(__name__)

FALLBACK_AVATAR = "https://github.com/we-promise.png"
FALLBACK_USERNAME = "we-promise"
FALLBACK_NAME = "Release notes unavailable"
FALLBACK_RELEASES_URL = "https://github.com/we-promise/sure/releases"


def fallback_release_notes(today: date | None = None, releases_url: str = FALLBACK_RELEASES_URL) -> ReleaseNotes:
    return ReleaseNotes(
        avatar=FALLBACK_AVATAR,
        username=FALLBACK_USERNAME,
        name=FALLBACK_NAME,
        published_at=today or date.today(),
        body=(
            "<p>Unable to fetch the latest release notes at this time. "
            "Please check back later or visit our "
            f"<a href='{releases_url}' target='_blank'>GitHub releases page</a> directly.</p>"
        ),
    )


async def load_release_notes(provider: GitHubProvider | None, today: date | None = None) -> ReleaseNotes:
    notes = await provider.fetch_latest_release_notes() if provider else None
    if notes is None:
        logger.info("[CHANGELOG] Release notes unavailable; using fallback.")
        releases_url = provider.releases_url if provider else FALLBACK_RELEASES_URL
        return fallback_release_notes(today, releases_url=releases_url)
    return notes
