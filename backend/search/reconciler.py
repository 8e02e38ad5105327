from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..catalog.models import Restaurant
from ..catalog.store import list_restaurants
from .config import DEFAULT_SEARCH_CONFIG
from .engine import GroqSearchEngine
from .models import FlatSearchRecord, MatchResult
from .projector import project_catalog
from .uploads import staged_upload

logger = logging.getLogger(__name__)

EngineFactory = Callable[[list[FlatSearchRecord]], GroqSearchEngine]


class MissingImageError(ValueError):
    """Raised when an image search arrives without an image."""


def match_keys(result: MatchResult) -> tuple[set[str], set[tuple[str, str]]]:
    """Restaurant ids and (restaurant id, dish name) keys named by a result."""
    matches = result.data.results if result.data else []
    restaurant_ids = {m.restaurant_id for m in matches}
    dish_keys = {(m.restaurant_id, m.dish_name) for m in matches}
    return restaurant_ids, dish_keys


def reconcile(restaurants: list[Restaurant], result: MatchResult) -> list[Restaurant]:
    """
    Keep only matched restaurants, each with only its matched dishes.

    Catalog order and per-restaurant dish order are preserved; the engine's
    ranking is not.
    """
    if not result.ok:
        logger.warning(
            "Search engine returned status=%r (%s); treating as no matches",
            result.status,
            result.message or "no detail",
        )
        return []

    restaurant_ids, dish_keys = match_keys(result)

    matched: list[Restaurant] = []
    for r in restaurants:
        rid = str(r.id)
        if rid not in restaurant_ids:
            continue
        dishes = [d for d in r.dishes if (rid, d.name) in dish_keys]
        matched.append(r.model_copy(update={"dishes": dishes}))

    logger.info(
        "Search matched %d dishes across %d restaurants",
        sum(len(r.dishes) for r in matched),
        len(matched),
    )
    return matched


def search_by_text(
    text: str,
    *,
    engine_factory: EngineFactory = GroqSearchEngine,
) -> list[Restaurant]:
    restaurants = list_restaurants()
    engine = engine_factory(project_catalog(restaurants))
    result = engine.search(text)
    return reconcile(restaurants, result)


def search_by_image(
    image: bytes | None,
    filename: str | None,
    text: str = "",
    preferences: str = "",
    limit: int | None = None,
    *,
    engine_factory: EngineFactory = GroqSearchEngine,
    upload_dir: Path | None = None,
) -> list[Restaurant]:
    """Image search; the uploaded bytes are staged to disk only for the engine call."""
    if not image:
        raise MissingImageError("Image file is required")

    restaurants = list_restaurants()
    engine = engine_factory(project_catalog(restaurants))

    with staged_upload(image, filename, upload_dir) as path:
        result = engine.search(
            text or "",
            image_path=path,
            preferences=preferences or "",
            limit=DEFAULT_SEARCH_CONFIG.default_limit if limit is None else limit,
        )

    return reconcile(restaurants, result)
