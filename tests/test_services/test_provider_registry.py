"""Tests for the image provider registry"""
import pytest

from config.settings import settings
from services.image_generation import registry
from services.image_generation.providers import FalFluxProProvider, FalFluxTurboProvider, OpenAIProvider
from services.image_generation.registry import (
    DEFAULT_MODEL,
    PROVIDER_REGISTRY,
    clear_provider_cache,
    get_available_providers,
    get_default_provider_id,
    get_provider,
    has_any_provider,
    is_key_configured,
)
from services.image_generation.types import UnknownProviderError


class TestRegistryContents:

    def test_registry_order_and_ids(self):
        assert list(PROVIDER_REGISTRY) == ["openai-dalle3", "fal-flux-turbo", "fal-flux-pro"]
        assert DEFAULT_MODEL == "fal-flux-turbo"

    def test_capabilities(self):
        dalle = PROVIDER_REGISTRY["openai-dalle3"].info
        turbo = PROVIDER_REGISTRY["fal-flux-turbo"].info
        pro = PROVIDER_REGISTRY["fal-flux-pro"].info

        assert dalle.capabilities.supports_image_reference is False
        assert dalle.capabilities.max_reference_images == 0
        assert dalle.env_key == "OPENAI_API_KEY"

        assert turbo.capabilities.max_reference_images == 1
        assert turbo.capabilities.max_output_images == 4
        assert turbo.cost == "$0.008/image"
        assert turbo.speed == "fast"

        assert pro.capabilities.max_reference_images == 9
        assert pro.capabilities.max_output_images == 1
        assert pro.env_key == "FAL_KEY"


class TestAvailability:

    def test_nothing_configured(self):
        assert get_available_providers() == []
        assert has_any_provider() is False
        assert get_default_provider_id() == DEFAULT_MODEL

    def test_fal_key_enables_both_fal_models(self, fal_key):
        ids = [p.id for p in get_available_providers()]
        assert ids == ["fal-flux-turbo", "fal-flux-pro"]
        assert get_default_provider_id() == "fal-flux-turbo"

    def test_openai_only_becomes_default(self, openai_key):
        assert [p.id for p in get_available_providers()] == ["openai-dalle3"]
        assert get_default_provider_id() == "openai-dalle3"

    def test_all_configured_keeps_registry_order(self, fal_key, openai_key):
        ids = [p.id for p in get_available_providers()]
        assert ids == ["openai-dalle3", "fal-flux-turbo", "fal-flux-pro"]
        assert get_default_provider_id() == DEFAULT_MODEL

    def test_key_from_settings_when_env_missing(self, monkeypatch):
        monkeypatch.setattr(settings, "fal_key", "from-dotenv")
        assert is_key_configured("FAL_KEY") is True
        assert is_key_configured("OPENAI_API_KEY") is False

    def test_blank_env_value_is_not_configured(self, monkeypatch):
        monkeypatch.setenv("FAL_KEY", "   ")
        assert is_key_configured("FAL_KEY") is False


class TestGetProvider:

    def test_unknown_provider(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            get_provider("stable-diffusion")
        assert str(exc_info.value) == "Unknown provider: stable-diffusion"

    def test_instances_are_typed_and_cached(self):
        turbo = get_provider("fal-flux-turbo")
        assert isinstance(turbo, FalFluxTurboProvider)
        assert isinstance(get_provider("fal-flux-pro"), FalFluxProProvider)
        assert isinstance(get_provider("openai-dalle3"), OpenAIProvider)
        assert get_provider("fal-flux-turbo") is turbo

    def test_provider_sees_keys_set_after_creation(self, monkeypatch):
        provider = get_provider("fal-flux-pro")
        assert provider.is_configured() is False
        monkeypatch.setenv("FAL_KEY", "late-key")
        assert provider.is_configured() is True

    @pytest.mark.asyncio
    async def test_clear_cache(self):
        first = get_provider("openai-dalle3")
        await clear_provider_cache()
        assert registry._provider_cache == {}
        assert get_provider("openai-dalle3") is not first
