"""
Application Configuration
Set the completion service credential here or via environment variables
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

# Completion service defaults
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 2500
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60.0

# Manual retries allowed per prompt after the first attempt
DEFAULT_MAX_RETRIES = 3

APP_MODES = ("development", "production")


class Settings(BaseModel):
    """Runtime settings injected into the completion client and the server"""

    openai_api_key: Optional[str] = Field(None, description="Bearer credential for the completion service")
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT
    app_mode: str = Field("development", description="'development' or 'production'")
    database_url: Optional[str] = Field(None, description="Transcript archive; disabled when unset")
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def is_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @property
    def is_development(self) -> bool:
        return self.app_mode != "production"


def load_settings() -> Settings:
    """
    Build settings from the environment

    Priority: Environment variable > defaults
    """
    app_mode = os.getenv("APP_MODE", "development").strip().lower()
    if app_mode not in APP_MODES:
        app_mode = "development"

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        app_mode=app_mode,
        database_url=os.getenv("DATABASE_URL") or None,
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
