"""
AI poll generation.

Asks an OpenAI chat model for a batch of neutral poll questions and creates
each one as a regular poll owned by the requesting admin. Questions the model
returns in an unusable shape are reported back instead of failing the batch.
"""

import json
import logging
from typing import Any, List, Optional

import httpx
from fastapi import HTTPException
from pydantic import ValidationError
from supabase import Client

from app.modules.poll_generation.schemas import (
    PollGenerationRequest, PollGenerationResult, GeneratedPollError
)
from app.modules.polls.schemas import PollCreate
from app.modules.polls.service import PollService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates engaging poll questions. "
    "Your responses should be in valid JSON format only, with no additional text."
)

POLL_GUIDELINES = """Each poll should have a title, 2-6 options, and a category.

The polls should be:
1. Neutral and unbiased
2. Engaging and thought-provoking
3. Appropriate for a general audience
4. Not politically divisive or controversial
5. Clear and concise

Return a JSON object of the form:
{"polls": [{"title": "Poll question here?", "options": ["Option 1", "Option 2", "Option 3"], "category": "Category Name"}]}

Make sure each poll has a different category if multiple categories were provided."""


def build_poll_prompt(num_polls: int, topic: Optional[str] = None, categories: Optional[List[str]] = None) -> str:
    prompt = f"Generate {num_polls} engaging and neutral poll questions"
    if topic:
        prompt += f" about {topic}"
    if categories:
        prompt += f" in the following categories: {', '.join(categories)}"
    return f"{prompt}. {POLL_GUIDELINES}"


def parse_generated_polls(content: str) -> List[Any]:
    """Accept either {"polls": [...]} or a bare array"""
    parsed = json.loads(content)
    if isinstance(parsed, dict):
        parsed = parsed.get("polls", parsed)
    if not isinstance(parsed, list):
        raise ValueError("Response is not an array of polls")
    return parsed


class OpenAIClient:
    """Minimal client for the OpenAI chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1"
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.model = model
        self.base_url = base_url.rstrip("/")

    async def complete_json(self, system: str, prompt: str, temperature: float = 0.7) -> str:
        """Return the message content of a JSON-mode chat completion"""
        response = await self.http_client.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                "response_format": {"type": "json_object"},
                "temperature": temperature,
            },
        )
        response.raise_for_status()
        data = response.json()
        return data["choices"][0]["message"]["content"]


class PollGenerationService:
    def __init__(self, supabase: Client, client: Optional[OpenAIClient]):
        self.supabase = supabase
        self.client = client

    async def generate_polls(self, admin_id: str, request: PollGenerationRequest) -> PollGenerationResult:
        if self.client is None:
            raise HTTPException(status_code=500, detail="OpenAI API key not configured")

        prompt = build_poll_prompt(request.num_polls, request.topic, request.categories)
        try:
            content = await self.client.complete_json(SYSTEM_PROMPT, prompt)
        except httpx.HTTPStatusError as e:
            logger.error(f"OpenAI API HTTP error: {e.response.status_code}")
            raise HTTPException(
                status_code=502,
                detail=f"OpenAI request failed with status {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            logger.error(f"OpenAI API error: {e}")
            raise HTTPException(status_code=502, detail="OpenAI request failed")
        except (KeyError, IndexError, ValueError) as e:
            logger.error(f"Unexpected OpenAI response: {e}")
            raise HTTPException(status_code=502, detail="Unexpected OpenAI response")

        try:
            generated = parse_generated_polls(content)
        except (ValueError, TypeError) as e:
            logger.error(f"Error parsing OpenAI response: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to parse OpenAI response: {e}")

        result = PollGenerationResult()
        polls = PollService(self.supabase)
        for item in generated:
            title = str(item["title"]) if isinstance(item, dict) and item.get("title") is not None else None
            try:
                if not isinstance(item, dict):
                    raise ValueError("Generated poll is not an object")
                poll_data = PollCreate(
                    title=title or "",
                    description=item.get("description"),
                    options=[str(o) for o in (item.get("options") or [])],
                    type="country" if request.country else "global",
                    country=request.country,
                    category=item.get("category") or "General",
                )
                result.created_polls.append(polls.create_poll(admin_id, poll_data))
            except ValidationError as e:
                message = "; ".join(err["msg"] for err in e.errors())
                result.errors.append(GeneratedPollError(title=title, error=message))
            except ValueError as e:
                result.errors.append(GeneratedPollError(title=title, error=str(e)))
            except HTTPException as e:
                result.errors.append(GeneratedPollError(title=title, error=str(e.detail)))

        result.total_created = len(result.created_polls)
        result.total_errors = len(result.errors)
        logger.info(
            f"Poll generation by {admin_id}: {result.total_created} created, {result.total_errors} failed"
        )
        return result
