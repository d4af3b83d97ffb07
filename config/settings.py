"""Image provider configuration"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Provider credentials and tuning, loaded from the environment or .env"""

    # OpenAI (DALL-E 3 + vision analysis of reference images)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_image_model: str = "dall-e-3"
    openai_vision_model: str = "gpt-4o-mini"
    openai_vision_max_tokens: int = 500

    # FAL (FLUX Turbo / FLUX Pro)
    fal_key: str = ""
    fal_base_url: str = "https://fal.run"
    fal_flux_turbo_endpoint: str = "fal-ai/flux/dev"
    fal_flux_pro_endpoint: str = "fal-ai/flux-pro/v1.1"

    # HTTP behaviour shared by every provider
    provider_timeout: float = 120.0
    provider_max_attempts: int = 3
    provider_backoff_factor: float = 2.0

    # Mock placeholder images (portrait 9:16)
    mock_image_base_url: str = "https://picsum.photos/seed"
    mock_image_width: int = 1024
    mock_image_height: int = 1792

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
