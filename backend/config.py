"""Backend configuration using Pydantic Settings"""
from pydantic_settings import BaseSettings
from typing import List
import os


class BackendSettings(BaseSettings):
    """Backend configuration loaded from environment variables"""

    # ==================== Server Configuration ====================
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"
    api_title: str = "Storyboard Studio API"
    api_version: str = "1.0.0"
    api_description: str = """
    In-memory storyboard asset manager for AI-generated video.

    Features:
    - Projects, videos, ordered frames, context notes and main chats
    - Image generation through FAL FLUX, OpenAI DALL-E 3 or mock placeholders
    - Copy, move and remove images across frames, context, galleries and characters
    """
    cors_origins: List[str] = ["*"]

    # ==================== Storage ====================
    seed_sample_data: bool = True

    # ==================== Generation ====================
    generated_images_per_prompt: int = 4
    mock_generation_delay: float = 0.5
    mock_fallback_on_error: bool = True

    # ==================== Logging ====================
    log_to_files: bool = True
    log_dir: str = "./logs"
    log_rotation: str = "1 day"
    log_retention: str = "30 days"
    log_format: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = BackendSettings()

# Override log_level from environment if set (for uvicorn reload support)
if os.getenv('LOG_LEVEL'):
    settings.log_level = os.getenv('LOG_LEVEL')
