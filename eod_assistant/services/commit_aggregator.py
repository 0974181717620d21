import asyncio
import logging
from collections.abc import Iterator
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import replace
from datetime import UTC
from datetime import date
from datetime import datetime
from datetime import time
from datetime import timedelta

import httpx

from eod_assistant.clients.github_client import DEFAULT_BRANCH
from eod_assistant.clients.github_client import AggregatedCommit
from eod_assistant.clients.github_client import GitHubClient
from eod_assistant.clients.github_client import RepoRef
from eod_assistant.settings import Settings


logger = logging.getLogger(__name__)

BRANCH_BATCH_SIZE = 5
END_OF_DAY = time(23, 59, 59, 999000)


class InvalidAggregationInputError(Exception):
    """Raised when a required aggregation input is missing."""


@dataclass(frozen=True)
class ContributionDay:
    day: date
    count: int


@dataclass(frozen=True)
class ContributionSeries:
    days: list[ContributionDay]
    total_commits: int


@dataclass(frozen=True)
class CommitReport:
    """Commits for one window plus the number of absorbed upstream failures."""

    commits: list[AggregatedCommit]
    since: datetime
    until: datetime
    failed_requests: int


@dataclass(frozen=True)
class ContributionReport:
    series: ContributionSeries
    failed_requests: int


def batched(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def day_window(target_day: date) -> tuple[datetime, datetime]:
    """Return the inclusive UTC bounds of one calendar day."""

    since = datetime.combine(target_day, time.min, tzinfo=UTC)
    until = datetime.combine(target_day, END_OF_DAY, tzinfo=UTC)
    return since, until


def contribution_window(weeks: int, today: date) -> tuple[datetime, datetime]:
    """Return bounds from the start of `weeks * 7` days ago to the end of today."""

    since, _ = day_window(today - timedelta(days=weeks * 7))
    _, until = day_window(today)
    return since, until


def validate_aggregation_inputs(
    owner: str | None,
    repo: str | None,
    author: str | None,
    token: str | None,
) -> RepoRef:
    """Check required inputs before any upstream call and build the repo ref.

    Raises:
        InvalidAggregationInputError: If a required value is missing or blank.
    """

    if not token or not token.strip():
        raise InvalidAggregationInputError("GitHub token is required")
    if not owner or not owner.strip() or not repo or not repo.strip():
        raise InvalidAggregationInputError("owner and repo are required")
    if not author or not author.strip():
        raise InvalidAggregationInputError("GitHub author is required")

    return RepoRef(owner=owner.strip(), name=repo.strip())


async def aggregate_commits(
    client: GitHubClient,
    repo: RepoRef,
    author: str,
    since: datetime,
    until: datetime,
    batch_size: int = BRANCH_BATCH_SIZE,
) -> list[AggregatedCommit]:
    """Collect commits by `author` across all branches, newest first.

    Branches are fetched concurrently in batches of `batch_size`; each batch
    completes before the next one starts. A commit reachable from several
    branches is kept once.
    """

    branches = await client.list_branches(repo)
    if not branches:
        return await client.fetch_commits_for_branch(
            repo, DEFAULT_BRANCH, author, since, until
        )

    seen_shas: set[str] = set()
    commits: list[AggregatedCommit] = []
    for batch in batched(branches, max(1, batch_size)):
        results = await asyncio.gather(
            *(
                client.fetch_commits_for_branch(repo, branch, author, since, until)
                for branch in batch
            )
        )
        for branch_commits in results:
            for commit in branch_commits:
                if commit.full_sha in seen_shas:
                    continue
                seen_shas.add(commit.full_sha)
                commits.append(commit)

    commits.sort(key=lambda commit: commit.timestamp, reverse=True)

    logger.info(
        "Aggregated commits",
        extra={
            "repo": repo.full_name,
            "branches": len(branches),
            "commits": len(commits),
            "failed_requests": client.failed_requests,
        },
    )
    return commits


async def attach_changed_files(
    client: GitHubClient,
    repo: RepoRef,
    commits: list[AggregatedCommit],
    batch_size: int = BRANCH_BATCH_SIZE,
) -> list[AggregatedCommit]:
    """Return copies of `commits` with the names of the files each one touched."""

    files_by_sha: dict[str, list[str]] = {}
    shas = [commit.full_sha for commit in commits]
    for batch in batched(shas, max(1, batch_size)):
        results = await asyncio.gather(
            *(client.fetch_commit_files(repo, sha) for sha in batch)
        )
        files_by_sha.update(zip(batch, results))

    return [
        replace(commit, files_changed=tuple(files_by_sha.get(commit.full_sha, [])))
        for commit in commits
    ]


def bucket_by_day(
    commits: Sequence[AggregatedCommit], first_day: date, last_day: date
) -> list[ContributionDay]:
    """Count commits per UTC calendar day over a gap-free inclusive range."""

    counts: dict[date, int] = {}
    for commit in commits:
        day = commit.timestamp.astimezone(UTC).date()
        counts[day] = counts.get(day, 0) + 1

    days: list[ContributionDay] = []
    current_day = first_day
    while current_day <= last_day:
        days.append(ContributionDay(day=current_day, count=counts.get(current_day, 0)))
        current_day += timedelta(days=1)
    return days


async def build_contribution_series(
    client: GitHubClient,
    repo: RepoRef,
    author: str,
    weeks: int,
    batch_size: int = BRANCH_BATCH_SIZE,
    today: date | None = None,
) -> ContributionSeries:
    """Build a per-day commit count series covering the last `weeks` weeks."""

    today = today or datetime.now(UTC).date()
    since, until = contribution_window(weeks, today)

    commits = await aggregate_commits(
        client, repo, author, since, until, batch_size=batch_size
    )
    days = bucket_by_day(commits, since.date(), until.date())
    return ContributionSeries(days=days, total_commits=len(commits))


def _build_client(
    token: str,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None,
) -> GitHubClient:
    return GitHubClient(
        token=token,
        api_base_url=settings.github_api_base_url,
        user_agent=settings.github_user_agent,
        timeout=settings.github_timeout_seconds,
        transport=transport,
    )


async def get_day_commits(
    owner: str | None,
    repo: str | None,
    author: str | None,
    token: str | None,
    target_day: date,
    settings: Settings,
    include_files: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CommitReport:
    """Aggregate one calendar day of commits for the report dashboard."""

    repo_ref = validate_aggregation_inputs(owner, repo, author, token)
    since, until = day_window(target_day)

    async with _build_client(token, settings, transport) as client:
        commits = await aggregate_commits(
            client,
            repo_ref,
            author.strip(),
            since,
            until,
            batch_size=settings.branch_batch_size,
        )
        if include_files and commits:
            commits = await attach_changed_files(
                client, repo_ref, commits, batch_size=settings.branch_batch_size
            )

    return CommitReport(
        commits=commits,
        since=since,
        until=until,
        failed_requests=client.failed_requests,
    )


async def get_contributions(
    owner: str | None,
    repo: str | None,
    author: str | None,
    token: str | None,
    weeks: int,
    settings: Settings,
    today: date | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ContributionReport:
    """Build the heatmap contribution series for a repository and author."""

    repo_ref = validate_aggregation_inputs(owner, repo, author, token)
    if weeks < 1:
        raise InvalidAggregationInputError("weeks must be at least 1")

    async with _build_client(token, settings, transport) as client:
        series = await build_contribution_series(
            client,
            repo_ref,
            author.strip(),
            weeks,
            batch_size=settings.branch_batch_size,
            today=today,
        )

    return ContributionReport(series=series, failed_requests=client.failed_requests)
