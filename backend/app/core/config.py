from functools import lru_cache
from typing import Dict

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    hf_access_token: str = ""
    hf_api_base: str = "https://router.huggingface.co/hf-inference/models"
    hf_model_id: str = "mistralai/Mistral-7B-Instruct-v0.3"
    generation_timeout: float = 120.0

    # sampling
    max_new_tokens: int = 1000
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 50
    repetition_penalty: float = 1.1

    environment: str = "production"
    log_level: str = "INFO"

    # bearer token -> user id
    api_tokens: Dict[str, str] = {}

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

    @property
    def endpoint_url(self) -> str:
        return f"{self.hf_api_base.rstrip('/')}/{self.hf_model_id}"

    @property
    def diagnostics_enabled(self) -> bool:
        return self.environment.lower() == "development"

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
