from __future__ import annotations

import logging
import threading
from pathlib import Path

import numpy as np
import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .geo import haversine_km
from .models import Dish, DishCreate, Restaurant, RestaurantCreate, RestaurantUpdate

logger = logging.getLogger(__name__)

SEED_COLUMNS = [
    "restaurant_id",
    "restaurant_name",
    "price_range",
    "latitude",
    "longitude",
    "dish_name",
    "dish_price",
]

_restaurants: dict[int, Restaurant] = {}
_next_id: int = 1
_loaded: bool = False
# Guards the catalog globals above
_lock = threading.RLock()


class RestaurantNotFoundError(KeyError):
    def __init__(self, restaurant_id: int) -> None:
        super().__init__(restaurant_id)
        self.restaurant_id = restaurant_id

    def __str__(self) -> str:
        return f"Restaurant {self.restaurant_id} not found"


def _build_dishes(dishes: list[DishCreate]) -> list[Dish]:
    return [Dish(id=i, name=d.name, price=d.price) for i, d in enumerate(dishes, start=1)]


def load_seed(path: Path) -> int:
    """Replace the catalog with the restaurants in a flat dish-per-row CSV."""
    global _next_id, _loaded
    df = pd.read_csv(path)
    missing = [c for c in SEED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Seed file {path} is missing columns: {', '.join(missing)}")

    seeded: dict[int, Restaurant] = {}
    for rid, group in df.groupby("restaurant_id", sort=False):
        first = group.iloc[0]
        dishes: list[Dish] = []
        # A row without a dish name stands for a restaurant with an empty menu
        for _, row in group.iterrows():
            if pd.isna(row["dish_name"]):
                continue
            dishes.append(
                Dish(id=len(dishes) + 1, name=str(row["dish_name"]), price=float(row["dish_price"]))
            )
        seeded[int(rid)] = Restaurant(
            id=int(rid),
            name=str(first["restaurant_name"]),
            price_range=int(first["price_range"]),
            latitude=float(first["latitude"]),
            longitude=float(first["longitude"]),
            dishes=dishes,
        )

    with _lock:
        _restaurants.clear()
        _restaurants.update(seeded)
        _next_id = max(seeded, default=0) + 1
        _loaded = True
    logger.info("Seeded catalog with %d restaurants from %s", len(seeded), path)
    return len(seeded)


def _ensure_loaded(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> None:
    global _loaded
    if _loaded:
        return
    with _lock:
        if _loaded:
            return
        if config.seed_on_startup and config.seed_path.is_file():
            load_seed(config.seed_path)
        _loaded = True


def clear_restaurants() -> None:
    """Empty the catalog and skip lazy seeding."""
    global _next_id, _loaded
    with _lock:
        _restaurants.clear()
        _next_id = 1
        _loaded = True


def list_restaurants() -> list[Restaurant]:
    """Return every restaurant with its dishes, in catalog order."""
    _ensure_loaded()
    with _lock:
        return [r.model_copy(deep=True) for r in _restaurants.values()]


def get_restaurant(restaurant_id: int) -> Restaurant:
    _ensure_loaded()
    with _lock:
        restaurant = _restaurants.get(restaurant_id)
    if restaurant is None:
        raise RestaurantNotFoundError(restaurant_id)
    return restaurant.model_copy(deep=True)


def create_restaurant(payload: RestaurantCreate) -> Restaurant:
    global _next_id
    _ensure_loaded()
    with _lock:
        restaurant = Restaurant(
            id=_next_id,
            name=payload.name,
            price_range=payload.price_range,
            latitude=payload.latitude,
            longitude=payload.longitude,
            dishes=_build_dishes(payload.dishes),
        )
        _restaurants[restaurant.id] = restaurant
        _next_id += 1
    return restaurant.model_copy(deep=True)


def update_restaurant(restaurant_id: int, payload: RestaurantUpdate) -> Restaurant:
    changes = payload.model_dump(exclude_unset=True, exclude={"dishes"})
    if payload.dishes is not None:
        changes["dishes"] = _build_dishes(payload.dishes)

    _ensure_loaded()
    with _lock:
        current = _restaurants.get(restaurant_id)
        if current is None:
            raise RestaurantNotFoundError(restaurant_id)
        updated = current.model_copy(update=changes, deep=True)
        _restaurants[restaurant_id] = updated
    return updated.model_copy(deep=True)


def delete_restaurant(restaurant_id: int) -> None:
    _ensure_loaded()
    with _lock:
        if restaurant_id not in _restaurants:
            raise RestaurantNotFoundError(restaurant_id)
        del _restaurants[restaurant_id]


def find_by_name(name: str) -> list[Restaurant]:
    """Case-insensitive substring match on restaurant name."""
    needle = name.strip().lower()
    return [r for r in list_restaurants() if needle in r.name.lower()]


def find_by_price_range(price_range: int) -> list[Restaurant]:
    return [r for r in list_restaurants() if r.price_range == price_range]


def find_by_location(latitude: float, longitude: float, radius: float = 1.0) -> list[Restaurant]:
    """Restaurants within ``radius`` km of the given point."""
    restaurants = list_restaurants()
    if not restaurants:
        return []

    lats = np.array([r.latitude for r in restaurants], dtype=float)
    lngs = np.array([r.longitude for r in restaurants], dtype=float)
    distances = haversine_km(latitude, longitude, lats, lngs)
    return [r for r, d in zip(restaurants, distances) if d <= radius]
