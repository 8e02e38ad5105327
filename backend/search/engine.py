from __future__ import annotations

import base64
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any

from groq import Groq

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import SUCCESS, DishMatch, FlatSearchRecord, MatchData, MatchResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a dish search engine for a restaurant catalog. "
    "Given a search request and a table of dishes, pick the dishes that best "
    "match the request, best match first. When an image is attached, match "
    "dishes that look like or correspond to the food in the image.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"results": [{"restaurant_id": "<restaurant id>", "dish_name": "<dish name>", '
    '"score": <0.0-1.0>}]}\n'
    "Use restaurant ids and dish names exactly as they appear in the table. "
    "Return an empty results list when nothing matches."
)


def _build_user_message(
    records: list[FlatSearchRecord],
    text: str,
    preferences: str,
    limit: int,
) -> str:
    lines = ["## Search Request"]
    if text:
        lines.append(f"- Query: {text}")
    if preferences:
        lines.append(f"- Preferences: {preferences}")
    lines.append(f"- Maximum results: {limit}")

    lines.append("\n## Dishes")
    lines.append("| Restaurant ID | Restaurant | Dish | Price |")
    lines.append("|---|---|---|---|")
    for r in records:
        lines.append(f"| {r.restaurant_id} | {r.restaurant_name} | {r.dish_name} | {r.dish_price} |")

    return "\n".join(lines)


def _image_data_url(image_path: Path) -> str:
    mime, _ = mimetypes.guess_type(image_path.name)
    encoded = base64.b64encode(image_path.read_bytes()).decode()
    return f"data:{mime or 'image/jpeg'};base64,{encoded}"


class GroqSearchEngine:
    """
    Multimodal dish search backed by Groq chat completions.

    The engine is built per request from the flat catalog records it may
    choose from; matches naming a dish outside those records are dropped.
    """

    def __init__(
        self,
        records: list[FlatSearchRecord],
        config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    ) -> None:
        self.records = list(records)
        self.config = config
        self._known = {(r.restaurant_id, r.dish_name): r for r in self.records}

    def _messages(
        self,
        text: str,
        image_path: Path | None,
        preferences: str,
        limit: int,
    ) -> list[dict[str, Any]]:
        prompt = _build_user_message(self.records, text, preferences, limit)
        if image_path is None:
            user_content: Any = prompt
        else:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": _image_data_url(image_path)}},
            ]
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    def _parse(self, content: str, limit: int) -> MatchResult:
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError:
            return MatchResult(status="error", message="Engine returned invalid JSON")

        raw = parsed.get("results") if isinstance(parsed, dict) else None
        if not isinstance(raw, list):
            return MatchResult(status="error", message="Engine response has no results list")

        matches: list[DishMatch] = []
        seen: set[tuple[str, str]] = set()
        for item in raw:
            if not isinstance(item, dict):
                continue
            key = (str(item.get("restaurant_id", "")), str(item.get("dish_name", "")))
            record = self._known.get(key)
            if record is None or key in seen:
                continue
            seen.add(key)
            score = item.get("score")
            matches.append(DishMatch(
                restaurant_id=record.restaurant_id,
                dish_name=record.dish_name,
                restaurant_name=record.restaurant_name,
                dish_price=record.dish_price,
                score=float(score) if isinstance(score, (int, float)) else None,
            ))
            if len(matches) >= limit:
                break

        return MatchResult(status=SUCCESS, data=MatchData(results=matches))

    def search(
        self,
        text: str,
        image_path: str | Path | None = None,
        preferences: str = "",
        limit: int | None = None,
    ) -> MatchResult:
        """
        Run one search over the engine's records.

        Returns a ``disabled`` status when no API key is configured and an
        ``error`` status when the model output cannot be parsed. Errors raised
        by the Groq client itself propagate to the caller.
        """
        if limit is None:
            limit = self.config.default_limit

        if not self.config.enabled or not self.config.api_key:
            return MatchResult(status="disabled", message="Search engine is not configured")

        if not self.records or limit <= 0:
            return MatchResult(status=SUCCESS, data=MatchData())

        image = Path(image_path) if image_path is not None else None
        model = self.config.vision_model if image is not None else self.config.text_model

        client = Groq(api_key=self.config.api_key, timeout=self.config.timeout)
        response = client.chat.completions.create(
            model=model,
            messages=self._messages(text, image, preferences, limit),
            max_tokens=self.config.max_tokens,
            temperature=0.2,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        return self._parse(content, limit)
