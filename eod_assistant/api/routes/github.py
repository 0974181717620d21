import re
from datetime import UTC
from datetime import date
from datetime import datetime

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from sqlalchemy.orm import Session

from eod_assistant.api.schemas.github import CommitItem
from eod_assistant.api.schemas.github import CommitsResponse
from eod_assistant.api.schemas.github import ContributionDayItem
from eod_assistant.api.schemas.github import ContributionsResponse
from eod_assistant.api.schemas.github import DateRange
from eod_assistant.db import get_db
from eod_assistant.services.commit_aggregator import InvalidAggregationInputError
from eod_assistant.services.commit_aggregator import get_contributions
from eod_assistant.services.commit_aggregator import get_day_commits
from eod_assistant.services.profile_service import get_user_credentials
from eod_assistant.settings import Settings


router = APIRouter(prefix="/api/github")

GITHUB_URL_RE = re.compile(r"(?:https?://)?github\.com/[^/]+/([^/]+)")


def sanitize_repo_param(raw_repo: str) -> str:
    """Reduce a GitHub URL, `owner/repo` or bare name to the repository name."""

    cleaned = raw_repo.strip().rstrip("/")
    url_match = GITHUB_URL_RE.search(cleaned)
    if url_match:
        return url_match.group(1)
    if "/" in cleaned:
        parts = [part for part in cleaned.split("/") if part]
        return parts[-1]
    return cleaned


@router.get("")
async def get_commits(
    owner: str | None = Query(default=None),
    repo: str | None = Query(default=None),
    author: str | None = Query(default=None),
    target_date: date | None = Query(default=None, alias="date"),
    include_files: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> CommitsResponse:
    """Return one day of commits by an author across every repository branch."""

    settings = Settings()
    credentials = get_user_credentials(db, settings)
    if not credentials.github_token:
        raise HTTPException(
            status_code=400,
            detail="GitHub token not configured. Go to Settings to add it.",
        )

    repo_name = sanitize_repo_param(repo) if repo else None
    resolved_author = author or credentials.github_username

    try:
        report = await get_day_commits(
            owner=owner,
            repo=repo_name,
            author=resolved_author,
            token=credentials.github_token,
            target_day=target_date or datetime.now(UTC).date(),
            settings=settings,
            include_files=include_files,
        )
    except InvalidAggregationInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CommitsResponse(
        commits=[
            CommitItem(
                sha=commit.short_sha,
                full_sha=commit.full_sha,
                message=commit.message,
                date=commit.timestamp,
                url=commit.url,
                files_changed=(
                    list(commit.files_changed)
                    if commit.files_changed is not None
                    else None
                ),
            )
            for commit in report.commits
        ],
        repo=f"{owner}/{repo_name}",
        author=resolved_author,
        date_range=DateRange(since=report.since, until=report.until),
        failed_requests=report.failed_requests,
    )


@router.get("/contributions")
async def get_contribution_series(
    owner: str | None = Query(default=None),
    repo: str | None = Query(default=None),
    author: str | None = Query(default=None),
    weeks: int = Query(default=12, ge=1, le=52),
    db: Session = Depends(get_db),
) -> ContributionsResponse:
    """Return per-day commit counts for the heatmap, zero-filled."""

    settings = Settings()
    credentials = get_user_credentials(db, settings)
    if not credentials.github_token:
        raise HTTPException(status_code=400, detail="GitHub token not configured")

    repo_name = sanitize_repo_param(repo) if repo else None
    resolved_author = author or credentials.github_username

    try:
        report = await get_contributions(
            owner=owner,
            repo=repo_name,
            author=resolved_author,
            token=credentials.github_token,
            weeks=weeks,
            settings=settings,
        )
    except InvalidAggregationInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ContributionsResponse(
        contributions=[
            ContributionDayItem(date=day.day, count=day.count)
            for day in report.series.days
        ],
        total_commits=report.series.total_commits,
        repo=f"{owner}/{repo_name}",
        author=resolved_author,
        weeks=weeks,
        failed_requests=report.failed_requests,
    )
