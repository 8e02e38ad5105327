import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from backend.search.config import SearchConfig
from backend.search.engine import GroqSearchEngine
from backend.search.models import FlatSearchRecord

SAMPLE_RECORDS = [
    FlatSearchRecord(restaurant_id="1", restaurant_name="A", dish_name="Soup", dish_price=5.0),
    FlatSearchRecord(restaurant_id="1", restaurant_name="A", dish_name="Salad", dish_price=4.0),
    FlatSearchRecord(restaurant_id="2", restaurant_name="B", dish_name="Soup", dish_price=6.0),
]

ENABLED_CONFIG = SearchConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = SearchConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("backend.search.engine.Groq")
def test_search_returns_known_matches(mock_groq_cls):
    llm_response = json.dumps({
        "results": [
            {"restaurant_id": "2", "dish_name": "Soup", "score": 0.9},
            {"restaurant_id": 1, "dish_name": "Salad", "score": 0.4},
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("warm soup")

    assert result.status == "success"
    assert [(m.restaurant_id, m.dish_name) for m in result.data.results] == [("2", "Soup"), ("1", "Salad")]
    assert result.data.results[0].dish_price == 6.0
    assert result.data.results[0].score == 0.9

    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.text_model
    assert kwargs["response_format"] == {"type": "json_object"}
    assert "warm soup" in kwargs["messages"][1]["content"]
    assert "| 2 | B | Soup | 6.0 |" in kwargs["messages"][1]["content"]


@patch("backend.search.engine.Groq")
def test_search_drops_unknown_and_duplicate_matches(mock_groq_cls):
    llm_response = json.dumps({
        "results": [
            {"restaurant_id": "2", "dish_name": "Salad"},
            {"restaurant_id": "1", "dish_name": "Soup"},
            {"restaurant_id": "1", "dish_name": "Soup"},
            "garbage",
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("soup")

    assert [(m.restaurant_id, m.dish_name) for m in result.data.results] == [("1", "Soup")]


@patch("backend.search.engine.Groq")
def test_search_truncates_to_limit(mock_groq_cls):
    llm_response = json.dumps({
        "results": [
            {"restaurant_id": r.restaurant_id, "dish_name": r.dish_name} for r in SAMPLE_RECORDS
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("food", limit=2)

    assert len(result.data.results) == 2


@patch("backend.search.engine.Groq")
def test_image_search_uses_vision_model(mock_groq_cls, tmp_path: Path):
    image = tmp_path / "dish.png"
    image.write_bytes(b"\x89PNG fake")
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response('{"results": []}')

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search(
        "", image_path=image, preferences="vegetarian", limit=5,
    )

    assert result.status == "success"
    assert result.data.results == []
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.vision_model
    text_part, image_part = kwargs["messages"][1]["content"]
    assert "Preferences: vegetarian" in text_part["text"]
    assert "Maximum results: 5" in text_part["text"]
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


@patch("backend.search.engine.Groq")
def test_bad_json_is_error_status(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("soup")

    assert result.status == "error"
    assert result.data is None


@patch("backend.search.engine.Groq")
def test_missing_results_list_is_error_status(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response('{"dishes": []}')

    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("soup")

    assert result.status == "error"


@patch("backend.search.engine.Groq")
def test_api_error_propagates(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    with pytest.raises(Exception, match="API timeout"):
        GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("soup")


@patch("backend.search.engine.Groq")
def test_disabled_engine_skips_groq(mock_groq_cls):
    result = GroqSearchEngine(SAMPLE_RECORDS, config=DISABLED_CONFIG).search("soup")

    assert result.status == "disabled"
    mock_groq_cls.assert_not_called()


@patch("backend.search.engine.Groq")
def test_missing_api_key_is_disabled(mock_groq_cls):
    result = GroqSearchEngine(SAMPLE_RECORDS, config=SearchConfig(api_key="")).search("soup")

    assert result.status == "disabled"
    mock_groq_cls.assert_not_called()


@patch("backend.search.engine.Groq")
def test_empty_records_succeed_without_call(mock_groq_cls):
    result = GroqSearchEngine([], config=ENABLED_CONFIG).search("soup")

    assert result.status == "success"
    assert result.data.results == []
    mock_groq_cls.assert_not_called()


@patch("backend.search.engine.Groq")
def test_zero_limit_is_not_replaced_by_default(mock_groq_cls):
    result = GroqSearchEngine(SAMPLE_RECORDS, config=ENABLED_CONFIG).search("soup", limit=0)

    assert result.status == "success"
    assert result.data.results == []
    mock_groq_cls.assert_not_called()


@patch("backend.search.engine.Groq")
def test_missing_limit_uses_configured_default(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response('{"results": []}')

    GroqSearchEngine(SAMPLE_RECORDS, config=SearchConfig(api_key="test-key", default_limit=4)).search("soup")

    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert "Maximum results: 4" in kwargs["messages"][1]["content"]
