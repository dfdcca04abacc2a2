"""Match setup: the remembered API key and the list of models to choose from."""

from typing import Optional

from loguru import logger

from chessduel.ai.catalog import ModelCatalog, format_model_name, model_priority
from chessduel.api.models import ModelEntry, ModelListResponse, SaveCredentialRequest
from chessduel.core.config import Settings, get_settings
from chessduel.core.exceptions import InvalidRequestError
from chessduel.db.repository import CredentialStore

API_KEY_NAME = "openrouter_api_key"


class SetupService:
    def __init__(
        self,
        credentials: CredentialStore,
        settings: Optional[Settings] = None,
        catalog_factory: type[ModelCatalog] = ModelCatalog,
    ) -> None:
        self.credentials = credentials
        self.settings = settings or get_settings()
        self.catalog_factory = catalog_factory

    def save_api_key(self, request: SaveCredentialRequest) -> None:
        self.credentials.save(API_KEY_NAME, request.api_key)
        logger.info("API key saved")

    def restore_api_key(self) -> Optional[str]:
        """The stored key, else the one from the environment, else None."""
        return self.credentials.load(API_KEY_NAME) or self.settings.api_key or None

    def forget_api_key(self) -> None:
        self.credentials.clear(API_KEY_NAME)

    async def load_models(self, api_key: Optional[str] = None) -> ModelListResponse:
        """
        Fetch, filter, and rank the provider's models.

        Raises InvalidRequestError without a key, CatalogError when listing fails.
        """
        api_key = (api_key or "").strip() or self.restore_api_key()
        if not api_key:
            raise InvalidRequestError("Please enter your API key first.")

        catalog = self.catalog_factory(api_key, self.settings)
        models = await catalog.fetch_models()
        return ModelListResponse(
            models=[
                ModelEntry(
                    id=model.id,
                    display_name=format_model_name(model),
                    priority=model_priority(model),
                )
                for model in models
            ]
        )
