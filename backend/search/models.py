from __future__ import annotations

from pydantic import BaseModel, Field

SUCCESS = "success"


class FlatSearchRecord(BaseModel):
    restaurant_id: str
    restaurant_name: str
    dish_name: str
    dish_price: float


class DishMatch(BaseModel):
    restaurant_id: str
    dish_name: str
    restaurant_name: str | None = None
    dish_price: float | None = None
    score: float | None = None


class MatchData(BaseModel):
    results: list[DishMatch] = Field(default_factory=list)


class MatchResult(BaseModel):
    status: str | None = None
    message: str | None = None
    data: MatchData | None = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS and self.data is not None


class AiRestaurantSearchRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
