import httpx


async def post_to_slack(
    webhook_url: str,
    message: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Post a plain-text message to a Slack incoming webhook.

    Raises:
        ValueError: If the webhook URL is empty.
        httpx.HTTPStatusError: If Slack rejects the message.
    """

    if not webhook_url:
        raise ValueError("Slack webhook URL is required")

    async with httpx.AsyncClient(transport=transport, timeout=15.0) as client:
        response = await client.post(webhook_url, json={"text": message})
    response.raise_for_status()
