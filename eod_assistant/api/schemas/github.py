from datetime import date
from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommitItem(CamelModel):
    """Single deduplicated commit shown in the report editor."""

    sha: str
    full_sha: str
    message: str
    date: datetime
    url: str
    files_changed: list[str] | None = None


class DateRange(CamelModel):
    since: datetime
    until: datetime


class CommitsResponse(CamelModel):
    """Commits by one author across every branch for a single day."""

    commits: list[CommitItem]
    repo: str
    author: str
    all_branches: bool = True
    date_range: DateRange
    failed_requests: int


class ContributionDayItem(CamelModel):
    date: date
    count: int


class ContributionsResponse(CamelModel):
    """Gap-free per-day commit counts used by the activity heatmap."""

    contributions: list[ContributionDayItem]
    total_commits: int
    repo: str
    author: str
    weeks: int
    failed_requests: int
