import logging

import httpx

from eod_assistant.clients.slack_client import post_to_slack


logger = logging.getLogger(__name__)


class SlackAPIError(Exception):
    """Raised when Slack does not accept a posted report."""


async def publish_report(
    webhook_url: str,
    message: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Post a finished report to Slack."""

    try:
        await post_to_slack(webhook_url, message, transport=transport)
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Slack webhook rejected message",
            extra={"status_code": exc.response.status_code},
        )
        raise SlackAPIError(f"Slack API error ({exc.response.status_code})") from exc
    except httpx.HTTPError as exc:
        logger.warning("Slack webhook request failed")
        raise SlackAPIError("Slack API request failed") from exc
