"""Unit tests for chessduel/services/setup_service.py"""

from typing import Any, Optional

import pytest
from sqlalchemy.orm import Session

from chessduel.ai.catalog import ModelInfo
from chessduel.api.models import SaveCredentialRequest
from chessduel.core.config import Settings
from chessduel.core.exceptions import InvalidRequestError
from chessduel.db.sql_repository import SQLCredentialStore
from chessduel.services.setup_service import SetupService


class FakeCatalog:
    """Stands in for ModelCatalog: no network, remembers the key it was given."""

    used_keys: list[str] = []

    def __init__(self, api_key: str, settings: Optional[Settings] = None, **_: Any) -> None:
        self.used_keys.append(api_key)

    async def fetch_models(self) -> list[ModelInfo]:
        return [
            ModelInfo(id="openai/gpt-4o", name="OpenAI: gpt-4o"),
            ModelInfo(id="qwen/qwen-72b", name="Qwen 72B"),
        ]


@pytest.fixture
def setup_service(db_session_repo: Session) -> SetupService:
    FakeCatalog.used_keys = []
    return SetupService(
        SQLCredentialStore(db_session_repo),
        Settings(_env_file=None, api_key=""),
        catalog_factory=FakeCatalog,  # type: ignore[arg-type]
    )


def test_save_and_restore_key(setup_service: SetupService) -> None:
    assert setup_service.restore_api_key() is None
    setup_service.save_api_key(SaveCredentialRequest(api_key="  sk-secret "))
    assert setup_service.restore_api_key() == "sk-secret"

    setup_service.forget_api_key()
    assert setup_service.restore_api_key() is None


def test_key_from_environment(db_session_repo: Session) -> None:
    service = SetupService(
        SQLCredentialStore(db_session_repo), Settings(_env_file=None, api_key="env-key")
    )
    assert service.restore_api_key() == "env-key"


async def test_load_models(setup_service: SetupService) -> None:
    listing = await setup_service.load_models("sk-given")
    assert [entry.id for entry in listing.models] == ["openai/gpt-4o", "qwen/qwen-72b"]
    assert listing.models[0].display_name == "OpenAI: GPT-4 Omni"
    assert [entry.priority for entry in listing.models] == [2, 15]
    assert FakeCatalog.used_keys == ["sk-given"]


async def test_load_models_with_stored_key(setup_service: SetupService) -> None:
    setup_service.save_api_key(SaveCredentialRequest(api_key="sk-stored"))
    await setup_service.load_models()
    assert FakeCatalog.used_keys == ["sk-stored"]


async def test_load_models_without_key(setup_service: SetupService) -> None:
    with pytest.raises(InvalidRequestError):
        await setup_service.load_models("   ")
