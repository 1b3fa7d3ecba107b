import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from profile_page.api.routes.profile import router
from profile_page.api.schemas.profile import Showcase
from profile_page.core.middleware import ProfileRateLimitMiddleware
from profile_page.core.observability import configure_logging
from profile_page.core.observability import init_sentry
from profile_page.services.profile_service import ProfileDataService
from profile_page.settings import ASSETS_DIR
from profile_page.settings import PACKAGE_DIR
from profile_page.settings import Settings


logger = logging.getLogger(__name__)


def load_showcase(app_settings: Settings) -> Showcase:
    """Load the static repositories and achievements shown on every profile."""

    try:
        raw = app_settings.showcase_path.read_text(encoding="utf-8")
        return Showcase.model_validate_json(raw)
    except (OSError, ValidationError):
        logger.warning(
            "Showcase data unavailable at %s", app_settings.showcase_path, exc_info=True
        )
        return Showcase()


def create_app(
    app_settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the FastAPI application with its shared collaborators."""

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    if not app_settings.github_token:
        logger.warning(
            "GITHUB_TOKEN is not set, contribution heatmaps will use mock data"
        )

    client = http_client or httpx.AsyncClient(
        timeout=app_settings.http_timeout_seconds
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await client.aclose()

    app = FastAPI(title="GitHub Profile", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.showcase = load_showcase(app_settings)
    app.state.templates = Jinja2Templates(directory=PACKAGE_DIR / "templates")
    app.state.profile_service = ProfileDataService(
        client=client,
        api_base_url=app_settings.github_api_base_url,
        graphql_url=app_settings.github_graphql_url,
        token=app_settings.github_token,
        mock_contributions_path=app_settings.mock_contributions_path,
    )

    app.add_middleware(
        ProfileRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    app.mount("/assets", StaticFiles(directory=ASSETS_DIR), name="assets")
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured address."""

    app_settings = Settings()
    uvicorn.run(
        "profile_page.main:app",
        host=app_settings.host,
        port=app_settings.port,
        log_level=app_settings.log_level.lower(),
    )
