from __future__ import annotations

from ..catalog.models import Restaurant
from .models import FlatSearchRecord


def project_catalog(restaurants: list[Restaurant]) -> list[FlatSearchRecord]:
    """Flatten restaurants into one search record per dish."""
    return [
        FlatSearchRecord(
            restaurant_id=str(r.id),
            restaurant_name=r.name,
            dish_name=d.name,
            dish_price=d.price,
        )
        for r in restaurants
        for d in r.dishes
    ]
