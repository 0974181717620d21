import httpx
from openai import AsyncOpenAI


DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-sonnet-4"


async def complete_chat(
    api_key: str,
    system_message: str,
    user_message: str,
    base_url: str | None = None,
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 1024,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[str, str]:
    """Run one chat completion against an OpenAI-compatible endpoint.

    Returns the stripped completion text and the model that produced it.

    Raises:
        openai.APIError: If the provider call fails.
        ValueError: If the provider returns no content.
    """

    resolved_model = model or DEFAULT_MODEL
    http_client = httpx.AsyncClient(transport=transport, timeout=60.0)

    async with AsyncOpenAI(
        api_key=api_key,
        base_url=base_url or DEFAULT_BASE_URL,
        http_client=http_client,
    ) as client:
        response = await client.chat.completions.create(
            model=resolved_model,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        raise ValueError("LLM returned an empty response")

    return content.strip(), resolved_model
