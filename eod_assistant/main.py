from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from eod_assistant.api.routes.generate import router as generate_router
from eod_assistant.api.routes.github import router as github_router
from eod_assistant.api.routes.health import router as health_router
from eod_assistant.api.routes.jira import router as jira_router
from eod_assistant.api.routes.slack import router as slack_router
from eod_assistant.core.logging_config import setup_logging
from eod_assistant.core.middleware import GitHubRateLimitMiddleware
from eod_assistant.core.observability import init_sentry
from eod_assistant.db import init_db
from eod_assistant.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


def create_app() -> FastAPI:
    """Build the API application with logging, Sentry and rate limiting."""

    settings = Settings()
    setup_logging(settings.log_level)
    init_sentry(settings)

    app = FastAPI(title="EOD Assistant", lifespan=lifespan)
    app.add_middleware(
        GitHubRateLimitMiddleware,
        requests_per_window=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.include_router(health_router)
    app.include_router(github_router)
    app.include_router(jira_router)
    app.include_router(slack_router)
    app.include_router(generate_router)
    return app


app = create_app()
