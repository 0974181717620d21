import json
import logging
from typing import Any

import httpx
import openai
from sqlalchemy.orm import Session

from eod_assistant.clients.llm_client import complete_chat
from eod_assistant.models import Report


logger = logging.getLogger(__name__)

REPORT_SYSTEM_MESSAGE = (
    "You write a developer's end-of-day status update from the commits and "
    "tickets supplied as JSON."
)


class LLMAPIError(Exception):
    """Raised when the LLM provider fails or returns no report."""


def build_report_messages(
    project_name: str,
    commits: list[dict[str, Any]],
    tickets: list[dict[str, Any]],
    additional_context: str | None = None,
) -> tuple[str, str]:
    """Return the system and user messages carrying the report sources."""

    user_message = json.dumps(
        {
            "project": project_name,
            "commits": commits,
            "tickets": tickets,
            "additionalContext": additional_context,
        },
        indent=2,
    )
    return REPORT_SYSTEM_MESSAGE, user_message


async def generate_report(
    project_name: str,
    commits: list[dict[str, Any]],
    tickets: list[dict[str, Any]],
    api_key: str,
    base_url: str | None = None,
    model: str | None = None,
    additional_context: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[str, str]:
    """Draft a report with the LLM provider and return (content, model)."""

    system_message, user_message = build_report_messages(
        project_name, commits, tickets, additional_context
    )
    try:
        return await complete_chat(
            api_key=api_key,
            system_message=system_message,
            user_message=user_message,
            base_url=base_url,
            model=model,
            transport=transport,
        )
    except openai.APIError as exc:
        logger.warning(
            "LLM request failed",
            extra={"error": type(exc).__name__, "llm_model": model},
        )
        raise LLMAPIError("LLM API request failed") from exc
    except ValueError as exc:
        logger.warning("LLM returned no content", extra={"llm_model": model})
        raise LLMAPIError(str(exc)) from exc


def save_report(
    db: Session,
    project_id: str,
    content: str,
    model: str,
    raw_data: dict[str, Any],
) -> Report:
    report = Report(
        project_id=project_id, content=content, model=model, raw_data=raw_data
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    return report
