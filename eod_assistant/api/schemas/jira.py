from pydantic import BaseModel


class JiraTicket(BaseModel):
    key: str
    summary: str
    status: str
    type: str
    url: str
    priority: str | None = None


class JiraTicketsResponse(BaseModel):
    """In-progress tickets for one Jira project."""

    tickets: list[JiraTicket]
    project: str
    assignee: str
