from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from sqlalchemy.orm import Session

from eod_assistant.api.schemas.slack import SlackPostRequest
from eod_assistant.api.schemas.slack import SlackPostResponse
from eod_assistant.db import get_db
from eod_assistant.services.profile_service import get_user_credentials
from eod_assistant.services.slack_service import SlackAPIError
from eod_assistant.services.slack_service import publish_report
from eod_assistant.settings import Settings


router = APIRouter(prefix="/api/slack")


@router.post("")
async def post_report(
    payload: SlackPostRequest, db: Session = Depends(get_db)
) -> SlackPostResponse:
    """Post a finished report to the request's or the configured webhook."""

    webhook_url = payload.webhook_url
    if not webhook_url:
        webhook_url = get_user_credentials(db, Settings()).slack_webhook_url

    if not webhook_url:
        raise HTTPException(
            status_code=400,
            detail=(
                "webhookUrl is required (either in request body or "
                "SLACK_DEFAULT_WEBHOOK_URL env var)"
            ),
        )

    if not payload.message.strip():
        raise HTTPException(status_code=400, detail="message is required")

    try:
        await publish_report(webhook_url, payload.message)
    except SlackAPIError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return SlackPostResponse(success=True)
