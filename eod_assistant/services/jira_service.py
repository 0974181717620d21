import logging

import httpx

from eod_assistant.clients.jira_client import fetch_in_progress_tickets


logger = logging.getLogger(__name__)


class InvalidJiraCredentialsError(Exception):
    """Raised when Jira rejects the configured email and API token."""


class JiraAPIError(Exception):
    """Raised when Jira requests fail for non-auth reasons."""


def sanitize_domain(raw_domain: str) -> str:
    """Strip the scheme and trailing slashes from a Jira site domain."""

    domain = raw_domain.strip()
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            domain = domain[len(prefix) :]
            break
    return domain.rstrip("/")


async def get_in_progress_tickets(
    raw_domain: str,
    project_key: str,
    jira_email: str,
    jira_api_token: str,
    assignee_email: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, str | None]]:
    """Fetch in-progress tickets and translate upstream failures."""

    domain = sanitize_domain(raw_domain)
    try:
        return await fetch_in_progress_tickets(
            domain=domain,
            project_key=project_key,
            jira_email=jira_email,
            jira_api_token=jira_api_token,
            assignee_email=assignee_email,
            transport=transport,
        )
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Jira search failed",
            extra={"domain": domain, "status_code": exc.response.status_code},
        )
        if exc.response.status_code in {401, 403}:
            raise InvalidJiraCredentialsError from exc
        raise JiraAPIError(f"Jira API error ({exc.response.status_code})") from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Jira search failed", extra={"domain": domain})
        raise JiraAPIError("Jira API request failed") from exc
