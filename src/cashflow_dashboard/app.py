import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from cashflow_dashboard.api.routes import cashflow, pages
from cashflow_dashboard.core import settings
from cashflow_dashboard.integration.github import GitHubProvider
from cashflow_dashboard.logger import get_logger, setup_logging
from cashflow_dashboard.services.family_data import FamilyRepository

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        if not settings.GITHUB_TOKEN:
            logger.info("GITHUB_TOKEN not set. Release notes use unauthenticated GitHub requests.")

        family_repository = FamilyRepository(
            data_path=settings.FAMILY_DATA_PATH,
            default_currency=settings.DEFAULT_CURRENCY,
        )
        github = GitHubProvider(
            repo=settings.GITHUB_REPO,
            api_url=settings.GITHUB_API_URL,
            token=settings.GITHUB_TOKEN,
            timeout=settings.GITHUB_TIMEOUT,
        )

        app.state.family_repository = family_repository
        app.state.github = github

        logger.info("Services initialized.")
        yield
        await github.aclose()
        logger.info("Service shutting down.")

    app = FastAPI(title="Cashflow Dashboard", lifespan=lifespan)

    static_dir = os.path.join(os.path.dirname(__file__), "web/static")
    if not os.path.exists(static_dir):
        os.makedirs(static_dir)
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    app.include_router(pages.router)
    app.include_router(cashflow.router)

    return app


app = create_app()
