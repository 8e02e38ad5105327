from backend.catalog.models import Dish, Restaurant
from backend.search.projector import project_catalog


def _restaurant(rid: int, name: str, dishes: list[tuple[str, float]]) -> Restaurant:
    return Restaurant(
        id=rid,
        name=name,
        price_range=2,
        latitude=12.9,
        longitude=77.6,
        dishes=[Dish(id=i, name=n, price=p) for i, (n, p) in enumerate(dishes, start=1)],
    )


def test_one_record_per_dish():
    catalog = [
        _restaurant(1, "A", [("Soup", 5.0), ("Salad", 4.0)]),
        _restaurant(2, "B", [("Soup", 6.0)]),
    ]
    records = project_catalog(catalog)
    assert len(records) == sum(len(r.dishes) for r in catalog) == 3


def test_record_fields_and_order():
    records = project_catalog([
        _restaurant(1, "A", [("Soup", 5.0), ("Salad", 4.0)]),
        _restaurant(2, "B", [("Soup", 6.0)]),
    ])
    assert [(r.restaurant_id, r.restaurant_name, r.dish_name, r.dish_price) for r in records] == [
        ("1", "A", "Soup", 5.0),
        ("1", "A", "Salad", 4.0),
        ("2", "B", "Soup", 6.0),
    ]


def test_restaurant_without_dishes_contributes_nothing():
    records = project_catalog([
        _restaurant(1, "Empty", []),
        _restaurant(2, "B", [("Soup", 6.0)]),
    ])
    assert len(records) == 1
    assert records[0].restaurant_id == "2"


def test_empty_catalog():
    assert project_catalog([]) == []


def test_projection_does_not_mutate_catalog():
    catalog = [_restaurant(1, "A", [("Soup", 5.0)])]
    before = [r.model_dump() for r in catalog]
    project_catalog(catalog)
    assert [r.model_dump() for r in catalog] == before
