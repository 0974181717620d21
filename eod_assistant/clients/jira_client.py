from collections.abc import Mapping
from typing import Any

import httpx


MAX_RESULTS = 50
TICKET_FIELDS = ["summary", "status", "issuetype", "priority"]


def quote_jql(value: str) -> str:
    """Render a value as a double-quoted JQL string literal."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_jql(project_key: str, assignee_email: str | None = None) -> str:
    """Build the JQL selecting in-progress tickets of one project."""

    conditions = [
        f"project = {quote_jql(project_key)}",
        'status = "In Progress"',
    ]
    if assignee_email:
        conditions.append(f"assignee = {quote_jql(assignee_email)}")

    return " AND ".join(conditions) + " ORDER BY updated DESC"


def _field_name(fields: Mapping[str, Any], key: str) -> str | None:
    value = fields.get(key)
    if isinstance(value, Mapping) and isinstance(value.get("name"), str):
        return value["name"]
    return None


async def fetch_in_progress_tickets(
    domain: str,
    project_key: str,
    jira_email: str,
    jira_api_token: str,
    assignee_email: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, str | None]]:
    """Fetch "In Progress" tickets of a Jira Cloud project.

    Raises:
        httpx.HTTPStatusError: If Jira answers with a non-success status.
        ValueError: If the search response has an unexpected shape.
    """

    async with httpx.AsyncClient(transport=transport, timeout=20.0) as client:
        response = await client.post(
            f"https://{domain}/rest/api/3/search/jql",
            auth=(jira_email, jira_api_token),
            headers={"Accept": "application/json"},
            json={
                "jql": build_jql(project_key, assignee_email),
                "fields": TICKET_FIELDS,
                "maxResults": MAX_RESULTS,
            },
        )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("Jira search response is invalid")

    issues = payload.get("issues")
    if not isinstance(issues, list):
        raise ValueError("Jira search response is missing issues")

    tickets: list[dict[str, str | None]] = []
    for issue in issues:
        if not isinstance(issue, Mapping):
            continue
        key = issue.get("key")
        fields = issue.get("fields")
        if not isinstance(key, str) or not isinstance(fields, Mapping):
            continue

        summary = fields.get("summary")
        tickets.append(
            {
                "key": key,
                "summary": summary if isinstance(summary, str) else "",
                "status": _field_name(fields, "status") or "",
                "type": _field_name(fields, "issuetype") or "",
                "url": f"https://{domain}/browse/{key}",
                "priority": _field_name(fields, "priority"),
            }
        )

    return tickets
