"""Unit tests for chessduel/ai/catalog.py"""

from typing import Any

import httpx
import pytest

from chessduel.ai.catalog import (
    CATALOG_TIMEOUT,
    GENERIC_FAILURE,
    INVALID_CREDENTIAL,
    PERMISSION_PROBLEM,
    RATE_LIMITED,
    SERVER_ERROR,
    ModelCatalog,
    ModelInfo,
    filter_and_rank,
    format_model_name,
    is_suitable,
    model_priority,
    next_page_url,
)
from chessduel.core.config import Settings
from chessduel.core.exceptions import CatalogError

BASE_URL = "https://openrouter.ai/api/v1"


@pytest.fixture
def catalog_settings() -> Settings:
    return Settings(_env_file=None, api_base_url=BASE_URL, catalog_page_delay_s=0)


def entries(*model_ids: str) -> list[dict[str, Any]]:
    return [{"id": model_id, "name": model_id.split("/")[-1]} for model_id in model_ids]


def catalog(settings: Settings, handler: Any) -> ModelCatalog:
    return ModelCatalog("secret", settings, transport=httpx.MockTransport(handler))


# -- FILTER / RANK --
@pytest.mark.parametrize(
    "model_id, name, suitable",
    [
        ("openai/gpt-4o", "GPT-4o", True),
        ("openai/dalle-3", "DALL-E", False),
        ("openai/gpt-4-vision-preview", "GPT-4 Vision", False),
        ("openai/text-embedding-3", "Embedding", False),
        ("openai/omni-moderation", "Moderation", False),
        ("openai/gpt-3.5-turbo-instruct", "Instruct", False),
        ("openai/text-davinci-003", "Davinci", False),
        ("stability/stable-diffusion-xl", "SDXL", False),
        ("some/model", "Image Generator", False),
        ("", "No id", False),
    ],
)
def test_is_suitable(model_id: str, name: str, suitable: bool) -> None:
    assert is_suitable(ModelInfo(id=model_id, name=name)) == suitable


@pytest.mark.parametrize(
    "model_id, priority",
    [
        ("openai/gpt-5", 1),
        ("openai/o1-mini", 1),
        ("openai/gpt-4o-mini", 2),
        ("openai/gpt-4-turbo", 2),
        ("anthropic/claude-3.5-sonnet", 3),
        ("openai/gpt-4", 4),
        ("anthropic/claude-3-sonnet", 5),
        ("google/gemini-pro", 6),
        ("anthropic/claude-3-haiku", 7),
        ("meta-llama/llama-3-70b-instruct", 8),
        ("mistralai/mixtral-8x7b", 9),
        ("openai/gpt-3.5-turbo", 10),
        ("qwen/qwen-72b", 15),
    ],
)
def test_model_priority(model_id: str, priority: int) -> None:
    assert model_priority(ModelInfo(id=model_id)) == priority


def test_filter_and_rank() -> None:
    models = [
        ModelInfo(id=model_id)
        for model_id in [
            "zeta/unknown",
            "openai/gpt-3.5-turbo",
            "alpha/unknown",
            "openai/gpt-4o",
            "openai/text-embedding-3",
        ]
    ]
    ranked = [model.id for model in filter_and_rank(models)]
    assert ranked == ["openai/gpt-4o", "openai/gpt-3.5-turbo", "alpha/unknown", "zeta/unknown"]


@pytest.mark.parametrize(
    "model, display_name",
    [
        (ModelInfo(id="openai/gpt-4o", name="OpenAI: gpt-4o"), "OpenAI: GPT-4 Omni"),
        (ModelInfo(id="anthropic/claude-3-haiku", name="claude-3-haiku"), "Claude 3 Haiku"),
        (ModelInfo(id="some/model"), "some/model"),
    ],
)
def test_format_model_name(model: ModelInfo, display_name: str) -> None:
    assert format_model_name(model) == display_name


def test_long_names_are_truncated() -> None:
    name = format_model_name(ModelInfo(id="x/y", name="n" * 80))
    assert len(name) == 50
    assert name.endswith("...")


def test_model_info_tags() -> None:
    info = ModelInfo.from_entry(
        {
            "id": "openai/gpt-4o",
            "name": "GPT-4o",
            "architecture": {"modality": "text->text"},
            "supported_parameters": ["temperature", "top_p"],
            "pricing": {"prompt": "0.000005"},
        }
    )
    assert info.tags == ["text->text", "temperature", "top_p"]


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"next": "a"}, "a"),
        ({"links": {"next": "b"}}, "b"),
        ({"meta": {"next": "c"}}, "c"),
        ({"data": []}, None),
        ([], None),
    ],
)
def test_next_page_url(payload: Any, expected: Any) -> None:
    assert next_page_url(payload) == expected


# -- FETCHING --
async def test_fetch_single_page(catalog_settings: Settings) -> None:
    seen_headers: list[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers)
        assert str(request.url) == f"{BASE_URL}/models"
        return httpx.Response(
            200, json={"data": entries("openai/gpt-3.5-turbo", "openai/gpt-4o", "openai/dalle-3")}
        )

    models = await catalog(catalog_settings, handler).fetch_models()

    assert [model.id for model in models] == ["openai/gpt-4o", "openai/gpt-3.5-turbo"]
    assert seen_headers[0]["Authorization"] == "Bearer secret"
    assert seen_headers[0]["X-Title"] == catalog_settings.app_title
    assert "HTTP-Referer" in seen_headers[0]


async def test_fetch_follows_pagination(catalog_settings: Settings) -> None:
    pages = {
        f"{BASE_URL}/models": {"data": entries("a/one"), "next": f"{BASE_URL}/models?page=2"},
        f"{BASE_URL}/models?page=2": {
            "data": entries("a/two"),
            "links": {"next": f"{BASE_URL}/models?page=3"},
        },
        f"{BASE_URL}/models?page=3": {"data": entries("a/three"), "meta": {"next": None}},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[str(request.url)])

    models = await catalog(catalog_settings, handler).fetch_models()
    assert sorted(model.id for model in models) == ["a/one", "a/three", "a/two"]


async def test_page_guard(catalog_settings: Settings) -> None:
    """A provider that always returns a next link is not followed forever."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(
            200,
            json={"data": entries(f"a/model-{len(calls)}"), "next": f"{BASE_URL}/models?page={len(calls) + 1}"},
        )

    models = await catalog(catalog_settings, handler).fetch_models()
    assert len(calls) == 15
    assert len(models) == 15


async def test_plain_list_payload(catalog_settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=entries("a/one", "a/two"))

    models = await catalog(catalog_settings, handler).fetch_models()
    assert len(models) == 2


@pytest.mark.parametrize(
    "status_code, classification",
    [
        (401, INVALID_CREDENTIAL),
        (403, PERMISSION_PROBLEM),
        (429, RATE_LIMITED),
        (500, SERVER_ERROR),
        (502, SERVER_ERROR),
        (404, GENERIC_FAILURE),
    ],
)
async def test_error_classification(
    catalog_settings: Settings, status_code: int, classification: str
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text="nope")

    with pytest.raises(CatalogError) as exc_info:
        await catalog(catalog_settings, handler).fetch_models()
    assert exc_info.value.classification == classification


async def test_timeout(catalog_settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(CatalogError) as exc_info:
        await catalog(catalog_settings, handler).fetch_models()
    assert exc_info.value.classification == CATALOG_TIMEOUT


async def test_not_json(catalog_settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(CatalogError) as exc_info:
        await catalog(catalog_settings, handler).fetch_models()
    assert exc_info.value.classification == GENERIC_FAILURE
