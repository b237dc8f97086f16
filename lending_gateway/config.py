"""Configuration management using Pydantic Settings"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "lending-gateway"
    log_level: str = "INFO"

    # Risk model (OpenAI-compatible chat completions). No key means not configured.
    risk_model_api_key: Optional[str] = None
    risk_model_base_url: str = "https://api.openai.com/v1"
    risk_model_name: str = "gpt-3.5-turbo"
    risk_model_temperature: float = 0.3
    risk_model_max_tokens: int = 500
    risk_model_timeout_seconds: float = 10.0
    risk_sample_size: int = 5

    # Affordability thresholds (percent)
    max_dti_percent: float = 40.0
    min_liquidity_percent: float = 50.0

    # Arbitration
    risk_reject_threshold: int = 70
    fallback_risk_score: int = 50
    conflict_policy: Literal["affordability_floor", "risk_override", "manual_review"] = "affordability_floor"

    currency: str = "SAR"


settings = Settings()
