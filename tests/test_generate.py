import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from eod_assistant.clients.llm_client import complete_chat
from eod_assistant.models import Report
from eod_assistant.models import UserProfile
from eod_assistant.services.report_service import LLMAPIError
from eod_assistant.services.report_service import generate_report


COMMIT = {
    "sha": "aaaaaaa",
    "fullSha": "a" * 40,
    "message": "Add report editor",
    "date": "2026-02-20T10:00:00Z",
    "url": "https://github.com/octocat/hello/commit/aaaaaaa",
}


def chat_completion(content: str | None) -> dict[str, object]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1771581600,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.mark.asyncio
async def test_complete_chat_posts_messages_to_base_url() -> None:
    seen_requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_requests.append(request)
        return httpx.Response(200, json=chat_completion("  Shipped the editor.\n"))

    content, model = await complete_chat(
        api_key="llm-key",
        system_message="system",
        user_message="user",
        base_url="https://llm.example/v1",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )

    request = seen_requests[0]
    body = json.loads(request.content)
    assert str(request.url) == "https://llm.example/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer llm-key"
    assert body["model"] == "test-model"
    assert body["max_tokens"] == 1024
    assert body["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]
    assert (content, model) == ("Shipped the editor.", "test-model")


@pytest.mark.asyncio
async def test_generate_report_sends_sources_as_json() -> None:
    seen_bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_bodies.append(json.loads(request.content))
        return httpx.Response(200, json=chat_completion("Done."))

    await generate_report(
        project_name="Hello",
        commits=[COMMIT],
        tickets=[],
        api_key="llm-key",
        base_url="https://llm.example/v1",
        additional_context="Pairing in the afternoon",
        transport=httpx.MockTransport(handler),
    )

    user_message = json.loads(seen_bodies[0]["messages"][1]["content"])
    assert user_message["project"] == "Hello"
    assert user_message["commits"] == [COMMIT]
    assert user_message["additionalContext"] == "Pairing in the afternoon"


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "   "])
async def test_generate_report_rejects_empty_completion(content: str | None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=chat_completion(content))

    with pytest.raises(LLMAPIError, match="empty response"):
        await generate_report(
            project_name="Hello",
            commits=[COMMIT],
            tickets=[],
            api_key="llm-key",
            transport=httpx.MockTransport(handler),
        )


@pytest.mark.asyncio
async def test_generate_report_translates_provider_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    with pytest.raises(LLMAPIError, match="LLM API request failed"):
        await generate_report(
            project_name="Hello",
            commits=[COMMIT],
            tickets=[],
            api_key="wrong",
            transport=httpx.MockTransport(handler),
        )


def test_generate_route_requires_api_key(db_client: TestClient) -> None:
    response = db_client.post(
        "/api/generate", json={"projectName": "Hello", "commits": [COMMIT]}
    )

    assert response.status_code == 400
    assert response.json() == {
        "detail": "LLM API key not configured. Go to Settings to add it."
    }


def test_generate_route_requires_project_name(
    monkeypatch: pytest.MonkeyPatch, db_client: TestClient
) -> None:
    monkeypatch.setenv("LLM_API_KEY", "llm-key")

    response = db_client.post("/api/generate", json={"commits": [COMMIT]})

    assert response.status_code == 400
    assert response.json() == {"detail": "projectName is required"}


def test_generate_route_requires_commits_or_tickets(
    monkeypatch: pytest.MonkeyPatch, db_client: TestClient
) -> None:
    monkeypatch.setenv("LLM_API_KEY", "llm-key")

    response = db_client.post("/api/generate", json={"projectName": "Hello"})

    assert response.status_code == 400
    assert response.json() == {
        "detail": "At least some commits or tickets are needed to generate a report"
    }


def test_generate_route_stores_report_for_project(
    monkeypatch: pytest.MonkeyPatch,
    db_client: TestClient,
    session_factory: sessionmaker[Session],
) -> None:
    with session_factory() as db:
        db.add(
            UserProfile(
                llm_api_key="stored-key",
                llm_base_url="https://llm.example/v1",
                llm_model="test-model",
            )
        )
        db.commit()
    calls: list[dict[str, object]] = []

    async def fake_generate_report(**kwargs) -> tuple[str, str]:
        calls.append(kwargs)
        return "Shipped the editor.", "test-model"

    monkeypatch.setattr(
        "eod_assistant.api.routes.generate.generate_report", fake_generate_report
    )

    response = db_client.post(
        "/api/generate",
        json={"projectId": "proj-1", "projectName": "Hello", "commits": [COMMIT]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "Shipped the editor."
    assert body["model"] == "test-model"
    assert calls[0]["api_key"] == "stored-key"
    assert calls[0]["base_url"] == "https://llm.example/v1"
    with session_factory() as db:
        report = db.scalar(select(Report))
    assert report is not None
    assert body["reportId"] == report.id
    assert report.project_id == "proj-1"
    assert report.raw_data["commits"][0]["fullSha"] == "a" * 40


def test_generate_route_returns_502_on_llm_failure(
    monkeypatch: pytest.MonkeyPatch, db_client: TestClient
) -> None:
    monkeypatch.setenv("LLM_API_KEY", "llm-key")

    async def failing_generate_report(**kwargs) -> tuple[str, str]:
        raise LLMAPIError("LLM returned an empty response")

    monkeypatch.setattr(
        "eod_assistant.api.routes.generate.generate_report", failing_generate_report
    )

    response = db_client.post(
        "/api/generate", json={"projectName": "Hello", "commits": [COMMIT]}
    )

    assert response.status_code == 502
    assert response.json() == {"detail": "LLM returned an empty response"}
