"""Tests for the FAL FLUX providers"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from services.image_generation.providers.fal_provider import (
    DEFAULT_IP_ADAPTER_SCALE,
    FalFluxProProvider,
    FalFluxTurboProvider,
    to_fal_size,
    with_context,
)
from services.image_generation.types import GenerateOptions, ProviderError


def fal_response(urls, seed=42, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.text = ""
    response.json.return_value = {"images": [{"url": u} for u in urls], "seed": seed}
    return response


class TestHelpers:

    def test_size_mapping(self):
        assert to_fal_size("1024x1024") == "square_hd"
        assert to_fal_size("1792x1024") == "landscape_16_9"
        assert to_fal_size("1024x1792") == "portrait_16_9"
        assert to_fal_size(None) == "portrait_16_9"

    def test_with_context(self):
        assert with_context("p", "moody") == "p\n\nContext: moody"
        assert with_context("p", "  ") == "p"
        assert with_context("p", None) == "p"


class TestFalFluxTurbo:

    @pytest.fixture
    def provider(self):
        return FalFluxTurboProvider(api_key="fal-test", base_url="https://fal.test")

    def test_payload(self, provider):
        payload = provider.build_payload(GenerateOptions(
            prompt="forest",
            context_text="autumn",
            reference_image_urls=["https://ref.test/1.png", "https://ref.test/2.png"],
            image_count=9,
            seed=7,
        ))

        assert payload["prompt"] == "forest\n\nContext: autumn"
        assert payload["num_inference_steps"] == 8
        assert payload["num_images"] == 4
        assert payload["enable_safety_checker"] is True
        assert payload["output_format"] == "png"
        assert payload["image_size"] == "portrait_16_9"
        assert payload["image_url"] == "https://ref.test/1.png"
        assert payload["seed"] == 7

    def test_payload_without_references_or_seed(self, provider):
        payload = provider.build_payload(GenerateOptions(prompt="forest"))
        assert "image_url" not in payload
        assert "seed" not in payload

    @pytest.mark.asyncio
    async def test_generate_single_call(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = fal_response([f"https://fal.media/{i}.png" for i in range(4)], seed=99)

            result = await provider.generate(GenerateOptions(prompt="forest", image_count=4))

            assert mock_post.call_count == 1
            assert mock_post.call_args.args[0] == "fal-ai/flux/dev"
            assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Key fal-test"
            assert result.model == "flux-turbo"
            assert result.provider == "fal"
            assert len(result.images) == 4
            assert all(img.seed == 99 for img in result.images)

    @pytest.mark.asyncio
    async def test_response_without_images(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            response = fal_response([])
            response.json.return_value = {"detail": "queued"}
            mock_post.return_value = response

            with pytest.raises(ProviderError, match="has no images"):
                await provider.generate(GenerateOptions(prompt="forest"))

    @pytest.mark.asyncio
    async def test_malformed_image_entries_are_skipped(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            response = fal_response([])
            response.json.return_value = {"images": ["https://fal.media/bare.png", None, {"url": 7}]}
            mock_post.return_value = response

            with pytest.raises(ProviderError, match="Failed to generate any images"):
                await provider.generate(GenerateOptions(prompt="forest"))

    @pytest.mark.asyncio
    async def test_non_object_body(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            response = fal_response([])
            response.json.return_value = ["https://fal.media/1.png"]
            mock_post.return_value = response

            with pytest.raises(ProviderError, match="expected a JSON object") as exc_info:
                await provider.generate(GenerateOptions(prompt="forest"))
            assert exc_info.value.provider == "fal-flux-turbo"

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post, \
             patch("utils.retry.asyncio.sleep", new_callable=AsyncMock):
            mock_post.side_effect = [
                httpx.ConnectError("reset"),
                fal_response(["https://fal.media/ok.png"]),
            ]

            result = await provider.generate(GenerateOptions(prompt="forest"))

            assert mock_post.call_count == 2
            assert result.images[0].url == "https://fal.media/ok.png"


class TestFalFluxPro:

    @pytest.fixture
    def provider(self):
        return FalFluxProProvider(api_key="fal-test", base_url="https://fal.test")

    def test_single_reference_uses_ip_adapter(self, provider):
        payload = provider.build_payload(GenerateOptions(
            prompt="portrait",
            reference_image_urls=["https://ref.test/face.png"],
            size="1024x1024",
        ))

        assert payload["ip_adapter_image_url"] == "https://ref.test/face.png"
        assert payload["ip_adapter_scale"] == DEFAULT_IP_ADAPTER_SCALE
        assert payload["safety_tolerance"] == "2"
        assert payload["image_size"] == "square_hd"
        assert "image_urls" not in payload

    def test_explicit_ip_adapter_scale(self, provider):
        payload = provider.build_payload(GenerateOptions(
            prompt="portrait",
            reference_image_urls=["https://ref.test/face.png"],
            ip_adapter_scale=0.3,
        ))
        assert payload["ip_adapter_scale"] == 0.3

    def test_many_references_capped_at_nine(self, provider):
        refs = [f"https://ref.test/{i}.png" for i in range(12)]
        payload = provider.build_payload(GenerateOptions(prompt="group", reference_image_urls=refs))

        assert payload["image_urls"] == refs[:9]
        assert "ip_adapter_image_url" not in payload

    @pytest.mark.asyncio
    async def test_one_call_per_image(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = [fal_response([f"https://fal.media/{i}.png"]) for i in range(4)]

            result = await provider.generate(GenerateOptions(prompt="group", image_count=4))

            assert mock_post.call_count == 4
            assert mock_post.call_args.args[0] == "fal-ai/flux-pro/v1.1"
            assert [img.url for img in result.images] == [f"https://fal.media/{i}.png" for i in range(4)]
            assert result.model == "flux-pro"

    @pytest.mark.asyncio
    async def test_malformed_entry_skipped_per_call(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            broken = fal_response([])
            broken.json.return_value = {"images": ["https://fal.media/bare.png"]}
            mock_post.side_effect = [broken, fal_response(["https://fal.media/ok.png"])]

            result = await provider.generate(GenerateOptions(prompt="group", image_count=2))

            assert mock_post.call_count == 2
            assert [img.url for img in result.images] == ["https://fal.media/ok.png"]

    @pytest.mark.asyncio
    async def test_server_error(self, provider):
        with patch.object(provider.client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = fal_response([], status_code=500)

            with pytest.raises(ProviderError) as exc_info:
                await provider.generate(GenerateOptions(prompt="group"))
            assert exc_info.value.status_code == 500
