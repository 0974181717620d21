import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from typing import Any

import httpx


logger = logging.getLogger(__name__)

BRANCHES_PER_PAGE = 100
COMMITS_PER_PAGE = 100
SHORT_SHA_LENGTH = 7

# Empty selector: the commit listing runs against the repository default ref.
DEFAULT_BRANCH = ""


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class AggregatedCommit:
    """A commit reduced to the fields the report layer renders."""

    short_sha: str
    full_sha: str
    message: str
    timestamp: datetime
    url: str
    files_changed: tuple[str, ...] | None = None


def parse_github_datetime(raw_value: str) -> datetime:
    return datetime.fromisoformat(raw_value.replace("Z", "+00:00"))


def format_github_instant(value: datetime) -> str:
    """Render an aware datetime as an ISO-8601 UTC instant with milliseconds."""

    utc_value = value.astimezone(UTC)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_aggregated_commit(item: Any) -> AggregatedCommit | None:
    """Map one upstream commit record, returning None when it is malformed."""

    if not isinstance(item, Mapping):
        return None

    sha = item.get("sha")
    html_url = item.get("html_url")
    commit = item.get("commit")
    if not isinstance(sha, str) or not sha or not isinstance(commit, Mapping):
        return None

    message = commit.get("message")
    author = commit.get("author")
    raw_date = author.get("date") if isinstance(author, Mapping) else None
    if not isinstance(message, str) or not isinstance(raw_date, str):
        return None

    try:
        timestamp = parse_github_datetime(raw_date)
    except ValueError:
        return None
    if timestamp.tzinfo is None:
        # Author dates are UTC; an offset-less value is read as UTC.
        timestamp = timestamp.replace(tzinfo=UTC)

    return AggregatedCommit(
        short_sha=sha[:SHORT_SHA_LENGTH],
        full_sha=sha,
        message=message.split("\n")[0],
        timestamp=timestamp,
        url=html_url if isinstance(html_url, str) else "",
    )


class GitHubClient:
    """Async GitHub REST client with lenient failure handling.

    Non-success responses, transport errors and unreadable payloads are
    logged and counted in `failed_requests`; the calling method then behaves
    as if upstream returned nothing.
    """

    def __init__(
        self,
        token: str,
        api_base_url: str = "https://api.github.com",
        user_agent: str = "eod-assistant",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.failed_requests = 0
        self._client = httpx.AsyncClient(
            base_url=api_base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": user_agent,
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            self.failed_requests += 1
            logger.warning(
                "GitHub request failed",
                extra={"path": path, "error": type(exc).__name__},
            )
            return None

        if not response.is_success:
            self.failed_requests += 1
            logger.warning(
                "GitHub request returned non-success status",
                extra={"path": path, "status_code": response.status_code},
            )
            return None

        try:
            return response.json()
        except ValueError:
            self.failed_requests += 1
            logger.warning("GitHub response is not valid JSON", extra={"path": path})
            return None

    async def list_branches(self, repo: RepoRef) -> list[str]:
        """Return every branch name of a repository, in upstream order.

        A failing page stops pagination; names from earlier pages are kept.
        """

        branches: list[str] = []
        page = 1
        while True:
            data = await self._get_json(
                f"/repos/{repo.owner}/{repo.name}/branches",
                params={"per_page": str(BRANCHES_PER_PAGE), "page": str(page)},
            )
            if not isinstance(data, list) or not data:
                break

            for item in data:
                if isinstance(item, Mapping) and isinstance(item.get("name"), str):
                    branches.append(item["name"])

            if len(data) < BRANCHES_PER_PAGE:
                break
            page += 1

        return branches

    async def fetch_commits_for_branch(
        self,
        repo: RepoRef,
        branch: str,
        author: str,
        since: datetime,
        until: datetime,
    ) -> list[AggregatedCommit]:
        """Fetch the first page of commits by `author` on `branch` in a window.

        Only one page is read per branch, so at most `COMMITS_PER_PAGE`
        commits are returned for a single branch and window.
        """

        params = {
            "author": author,
            "since": format_github_instant(since),
            "until": format_github_instant(until),
            "per_page": str(COMMITS_PER_PAGE),
        }
        if branch != DEFAULT_BRANCH:
            params["sha"] = branch

        data = await self._get_json(
            f"/repos/{repo.owner}/{repo.name}/commits", params=params
        )
        if not isinstance(data, list):
            return []

        if len(data) >= COMMITS_PER_PAGE:
            logger.warning(
                "Commit page is full, branch results may be truncated",
                extra={"repo": repo.full_name, "branch": branch or "(default)"},
            )

        commits: list[AggregatedCommit] = []
        for item in data:
            commit = to_aggregated_commit(item)
            if commit is not None:
                commits.append(commit)
        return commits

    async def fetch_commit_files(self, repo: RepoRef, sha: str) -> list[str]:
        """Return the file names touched by one commit, empty on failure."""

        data = await self._get_json(f"/repos/{repo.owner}/{repo.name}/commits/{sha}")
        if not isinstance(data, Mapping):
            return []

        files = data.get("files")
        if not isinstance(files, list):
            return []

        return [
            item["filename"]
            for item in files
            if isinstance(item, Mapping) and isinstance(item.get("filename"), str)
        ]
