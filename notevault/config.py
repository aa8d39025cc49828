"""Environment configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early to ensure environment variables are set
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at process start and passed explicitly to the vault, the
    text generator and the app factory.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    openai_api_key: str
    vault_path: Path = Field(validation_alias=AliasChoices("vault_path", "obsidian_vault_path"))
    openai_model: str = "gpt-4"
    openai_max_tokens: int = Field(default=2000, gt=0)
    openai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    server_name: str = "notevault"
    server_version: str = "1.0.0"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    allowed_origins: str = "*"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse allowed origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
