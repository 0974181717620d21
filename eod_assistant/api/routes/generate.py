from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from sqlalchemy.orm import Session

from eod_assistant.api.schemas.report import GenerateReportRequest
from eod_assistant.api.schemas.report import GenerateReportResponse
from eod_assistant.db import get_db
from eod_assistant.services.profile_service import get_user_credentials
from eod_assistant.services.report_service import LLMAPIError
from eod_assistant.services.report_service import generate_report
from eod_assistant.services.report_service import save_report
from eod_assistant.settings import Settings


router = APIRouter(prefix="/api/generate")


@router.post("")
async def generate(
    payload: GenerateReportRequest, db: Session = Depends(get_db)
) -> GenerateReportResponse:
    """Draft an end-of-day report and store it when a project is given."""

    credentials = get_user_credentials(db, Settings())
    if not credentials.llm_api_key:
        raise HTTPException(
            status_code=400,
            detail="LLM API key not configured. Go to Settings to add it.",
        )

    if not payload.project_name.strip():
        raise HTTPException(status_code=400, detail="projectName is required")

    if not payload.commits and not payload.tickets:
        raise HTTPException(
            status_code=400,
            detail="At least some commits or tickets are needed to generate a report",
        )

    commits = [
        commit.model_dump(mode="json", by_alias=True) for commit in payload.commits
    ]
    tickets = [ticket.model_dump(mode="json") for ticket in payload.tickets]

    try:
        content, model = await generate_report(
            project_name=payload.project_name.strip(),
            commits=commits,
            tickets=tickets,
            api_key=credentials.llm_api_key,
            base_url=credentials.llm_base_url,
            model=credentials.llm_model,
            additional_context=payload.additional_context,
        )
    except LLMAPIError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    report_id = None
    if payload.project_id:
        report = save_report(
            db,
            project_id=payload.project_id,
            content=content,
            model=model,
            raw_data={"commits": commits, "tickets": tickets},
        )
        report_id = report.id

    return GenerateReportResponse(content=content, model=model, report_id=report_id)
