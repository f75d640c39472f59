"""
Tests for Poll Generation Service.

Tests AI poll generation including:
- Prompt building and parsing of the model's JSON
- Creating generated polls with unique slugs
- Reporting unusable generated polls without failing the batch
- Upstream and configuration failures
"""

import json
from collections.abc import AsyncGenerator
from typing import List

import httpx
import pytest
from fastapi import HTTPException

from app.modules.poll_generation.schemas import PollGenerationRequest
from app.modules.poll_generation.service import (
    OpenAIClient, PollGenerationService, build_poll_prompt, parse_generated_polls
)


class RecordedOpenAI:
    """MockTransport handler replaying queued responses and keeping the requests."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []

    def reply(self, content: str) -> None:
        self.responses.append(httpx.Response(200, json={"choices": [{"message": {"content": content}}]}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


@pytest.fixture
def openai_api() -> RecordedOpenAI:
    return RecordedOpenAI()


@pytest.fixture
async def openai_client(openai_api: RecordedOpenAI) -> AsyncGenerator[OpenAIClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(openai_api)) as http_client:
        yield OpenAIClient("sk-test", http_client)


@pytest.mark.unit
class TestPromptAndParsing:
    def test_prompt_mentions_topic_and_categories(self) -> None:
        prompt = build_poll_prompt(3, "breakfast", ["Food", "Health"])
        assert prompt.startswith("Generate 3 engaging and neutral poll questions about breakfast")
        assert "in the following categories: Food, Health" in prompt
        assert "Not politically divisive" in prompt

    def test_prompt_without_extras(self) -> None:
        assert build_poll_prompt(1).startswith("Generate 1 engaging and neutral poll questions. ")

    def test_parse_wrapped_and_bare(self) -> None:
        assert parse_generated_polls('{"polls": [{"title": "A"}]}') == [{"title": "A"}]
        assert parse_generated_polls('[{"title": "B"}]') == [{"title": "B"}]

    @pytest.mark.parametrize("content", ['{"title": "lonely"}', '{"polls": "many"}', "not json"])
    def test_parse_rejects_non_arrays(self, content) -> None:
        with pytest.raises(ValueError):
            parse_generated_polls(content)


@pytest.mark.unit
class TestGeneratePolls:
    async def test_creates_polls(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.reply(json.dumps({"polls": [
            {"title": "Best breakfast drink?", "options": ["Tea", "Coffee", "Juice"], "category": "Food"},
            {"title": "Best breakfast drink?", "options": ["Tea", "Coffee"], "category": "Food"},
        ]}))
        service = PollGenerationService(fake_db, openai_client)

        result = await service.generate_polls(
            admin["id"], PollGenerationRequest(num_polls=2, topic="breakfast", categories=["Food"])
        )

        assert result.total_created == 2
        assert result.total_errors == 0
        assert [p.slug for p in result.created_polls] == ["best-breakfast-drink", "best-breakfast-drink-1"]
        stored = fake_db.row("polls", slug="best-breakfast-drink")
        assert stored["created_by"] == admin["id"]
        assert stored["type"] == "global"
        assert stored["category"] == "Food"
        assert stored["options"] == [{"text": "Tea", "votes": 0}, {"text": "Coffee", "votes": 0}, {"text": "Juice", "votes": 0}]

        [request] = openai_api.requests
        assert request.url.path.endswith("/chat/completions")
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o"
        assert body["response_format"] == {"type": "json_object"}
        assert body["temperature"] == 0.7
        assert "about breakfast" in body["messages"][1]["content"]

    async def test_country_polls(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.reply(json.dumps([{"title": "Favourite local dish?", "options": ["Jollof", "Egusi"]}]))

        result = await PollGenerationService(fake_db, openai_client).generate_polls(
            admin["id"], PollGenerationRequest(country="ng")
        )

        [poll] = result.created_polls
        assert poll.type == "country"
        assert poll.country == "NG"
        assert poll.category == "General"

    async def test_unusable_polls_are_reported(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.reply(json.dumps({"polls": [
            {"title": "Morning or night?", "options": ["Morning", "Night"]},
            {"title": "One option?", "options": ["Only"]},
            "nonsense",
            {"title": "Repeats?", "options": ["Yes", "yes"]},
        ]}))

        result = await PollGenerationService(fake_db, openai_client).generate_polls(
            admin["id"], PollGenerationRequest(num_polls=4)
        )

        assert result.total_created == 1
        assert result.total_errors == 3
        assert [e.title for e in result.errors] == ["One option?", None, "Repeats?"]
        assert "unique" in result.errors[2].error
        assert len(fake_db.rows("polls")) == 1

    async def test_upstream_error(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.responses.append(httpx.Response(429, json={"error": {"message": "slow down"}}))

        with pytest.raises(HTTPException) as exc:
            await PollGenerationService(fake_db, openai_client).generate_polls(admin["id"], PollGenerationRequest())

        assert exc.value.status_code == 502
        assert exc.value.detail == "OpenAI request failed with status 429"
        assert fake_db.rows("polls") == []

    async def test_unparsable_reply(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.reply("Sure! Here are some polls")

        with pytest.raises(HTTPException) as exc:
            await PollGenerationService(fake_db, openai_client).generate_polls(admin["id"], PollGenerationRequest())

        assert exc.value.status_code == 500
        assert exc.value.detail.startswith("Failed to parse OpenAI response")

    async def test_malformed_completion(self, fake_db, admin, openai_api, openai_client) -> None:
        openai_api.responses.append(httpx.Response(200, json={"choices": []}))

        with pytest.raises(HTTPException) as exc:
            await PollGenerationService(fake_db, openai_client).generate_polls(admin["id"], PollGenerationRequest())

        assert exc.value.status_code == 502

    async def test_missing_api_key(self, fake_db, admin) -> None:
        with pytest.raises(HTTPException) as exc:
            await PollGenerationService(fake_db, None).generate_polls(admin["id"], PollGenerationRequest())

        assert exc.value.status_code == 500
        assert exc.value.detail == "OpenAI API key not configured"
