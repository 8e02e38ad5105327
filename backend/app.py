from __future__ import annotations

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Response, UploadFile

from .catalog.models import Restaurant, RestaurantCreate, RestaurantUpdate
from .catalog.store import (
    RestaurantNotFoundError,
    create_restaurant,
    delete_restaurant,
    find_by_location,
    find_by_name,
    find_by_price_range,
    get_restaurant,
    list_restaurants,
    update_restaurant,
)
from .search.config import DEFAULT_SEARCH_CONFIG
from .search.engine import GroqSearchEngine
from .search.models import AiRestaurantSearchRequest
from .search.reconciler import EngineFactory, MissingImageError, search_by_image, search_by_text

app = FastAPI(title="Restaurant Dish Search API", version="1.0.0")


def get_engine_factory() -> EngineFactory:
    """Builds a fresh search engine per request from the projected catalog."""
    return GroqSearchEngine


def _not_found(exc: RestaurantNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Catalog CRUD ─────────────────────────────────────────────────────────


@app.post("/restaurants", response_model=Restaurant, status_code=201)
def create(body: RestaurantCreate) -> Restaurant:
    return create_restaurant(body)


@app.get("/restaurants", response_model=list[Restaurant])
def find_all() -> list[Restaurant]:
    return list_restaurants()


# ── AI search ────────────────────────────────────────────────────────────


@app.post("/restaurants/search-ai", response_model=list[Restaurant])
def ai_search(
    body: AiRestaurantSearchRequest,
    engine_factory: EngineFactory = Depends(get_engine_factory),
) -> list[Restaurant]:
    return search_by_text(body.text, engine_factory=engine_factory)


@app.post("/restaurants/search-ai/image", response_model=list[Restaurant])
def ai_image_search(
    image: UploadFile | None = File(default=None),
    text: str = Form(default=""),
    preferences: str = Form(default=""),
    limit: int = Form(default=DEFAULT_SEARCH_CONFIG.default_limit, ge=1, le=50),
    engine_factory: EngineFactory = Depends(get_engine_factory),
) -> list[Restaurant]:
    data = image.file.read() if image is not None else None
    try:
        return search_by_image(
            data,
            image.filename if image is not None else None,
            text=text,
            preferences=preferences,
            limit=limit,
            engine_factory=engine_factory,
        )
    except MissingImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ── Catalog lookups ──────────────────────────────────────────────────────


@app.get("/restaurants/search/name", response_model=list[Restaurant])
def search_name(name: str = Query(..., min_length=1)) -> list[Restaurant]:
    return find_by_name(name)


@app.get("/restaurants/search/price-range", response_model=list[Restaurant])
def search_price_range(price_range: int = Query(..., alias="range")) -> list[Restaurant]:
    return find_by_price_range(price_range)


@app.get("/restaurants/search/location", response_model=list[Restaurant])
def search_location(
    latitude: float = Query(..., ge=-90.0, le=90.0),
    longitude: float = Query(..., ge=-180.0, le=180.0),
    radius: float = Query(default=1.0, gt=0.0, description="Radius in km"),
) -> list[Restaurant]:
    return find_by_location(latitude, longitude, radius)


@app.get("/restaurants/{restaurant_id}", response_model=Restaurant)
def find_by_id(restaurant_id: int) -> Restaurant:
    try:
        return get_restaurant(restaurant_id)
    except RestaurantNotFoundError as exc:
        raise _not_found(exc)


@app.put("/restaurants/{restaurant_id}", response_model=Restaurant)
def update(restaurant_id: int, body: RestaurantUpdate) -> Restaurant:
    try:
        return update_restaurant(restaurant_id, body)
    except RestaurantNotFoundError as exc:
        raise _not_found(exc)


@app.delete("/restaurants/{restaurant_id}", status_code=204)
def delete(restaurant_id: int) -> Response:
    try:
        delete_restaurant(restaurant_id)
    except RestaurantNotFoundError as exc:
        raise _not_found(exc)
    return Response(status_code=204)
