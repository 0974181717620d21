from eod_assistant.api.schemas.github import CamelModel
from eod_assistant.api.schemas.jira import JiraTicket


class ReportCommit(CamelModel):
    """Commit as sent back by the report editor."""

    sha: str
    message: str
    date: str | None = None
    url: str | None = None
    full_sha: str | None = None
    files_changed: list[str] | None = None


class GenerateReportRequest(CamelModel):
    project_id: str | None = None
    project_name: str = ""
    commits: list[ReportCommit] = []
    tickets: list[JiraTicket] = []
    additional_context: str | None = None


class GenerateReportResponse(CamelModel):
    content: str
    model: str
    report_id: int | None = None
