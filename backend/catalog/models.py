from __future__ import annotations

from pydantic import BaseModel, Field


class Dish(BaseModel):
    id: int
    name: str
    price: float


class Restaurant(BaseModel):
    id: int
    name: str
    price_range: int
    latitude: float
    longitude: float
    dishes: list[Dish] = Field(default_factory=list)


class DishCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0.0)


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price_range: int = Field(..., ge=1, le=4, description="Price tier, 1 (cheap) to 4")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    dishes: list[DishCreate] = Field(default_factory=list)


class RestaurantUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    price_range: int | None = Field(default=None, ge=1, le=4)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    dishes: list[DishCreate] | None = Field(
        default=None,
        description="When given, replaces the restaurant's whole dish list",
    )
