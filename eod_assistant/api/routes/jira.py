from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from sqlalchemy.orm import Session

from eod_assistant.api.schemas.jira import JiraTicket
from eod_assistant.api.schemas.jira import JiraTicketsResponse
from eod_assistant.db import get_db
from eod_assistant.services.jira_service import InvalidJiraCredentialsError
from eod_assistant.services.jira_service import JiraAPIError
from eod_assistant.services.jira_service import get_in_progress_tickets
from eod_assistant.services.profile_service import get_user_credentials
from eod_assistant.settings import Settings


router = APIRouter(prefix="/api/jira")


@router.get("")
async def get_tickets(
    domain: str | None = Query(default=None),
    project_key: str | None = Query(default=None, alias="projectKey"),
    assignee: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> JiraTicketsResponse:
    """Return the in-progress tickets of a Jira project."""

    credentials = get_user_credentials(db, Settings())
    if not credentials.jira_email or not credentials.jira_api_token:
        raise HTTPException(
            status_code=400,
            detail="Jira credentials not configured. Go to Settings to add them.",
        )

    if not domain or not project_key:
        raise HTTPException(
            status_code=400,
            detail="domain and projectKey are required query parameters",
        )

    resolved_assignee = assignee or credentials.jira_email

    try:
        tickets = await get_in_progress_tickets(
            raw_domain=domain,
            project_key=project_key,
            jira_email=credentials.jira_email,
            jira_api_token=credentials.jira_api_token,
            assignee_email=resolved_assignee,
        )
    except InvalidJiraCredentialsError as exc:
        raise HTTPException(
            status_code=401, detail="Jira credentials are invalid"
        ) from exc
    except JiraAPIError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return JiraTicketsResponse(
        tickets=[JiraTicket(**ticket) for ticket in tickets],
        project=project_key,
        assignee=resolved_assignee,
    )
