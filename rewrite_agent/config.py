"""Configuration management for the Article Rewrite Agent."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL_CONFIG_PATH = Path(__file__).parent / "models.yaml"


class LLMRoute(BaseModel):
    """LLM model routing configuration."""
    primary: str


class ModelSettings(BaseModel):
    """LLM model-specific settings."""
    max_tokens: int = 1500
    timeout_seconds: int = 60


class Settings(BaseSettings):
    """Main application settings."""

    # ── Collaborator endpoints & credentials ──────────────────────────────
    laravel_api: str | None = Field(None, description="Content source base URL")
    serper_api_key: str | None = Field(None, description="Serper.dev search API key")
    hf_api_key: str | None = Field(None, description="Hugging Face inference API key")
    search_url: str = Field(
        "https://google.serper.dev/search", description="Search query endpoint"
    )
    llm_base_url: str = Field(
        "https://router.huggingface.co/v1",
        description="OpenAI-compatible inference endpoint"
    )

    # ── LLM Configuration ──────────────────────────────────────────────────
    llm_model_override: str | None = Field(
        None, description="Override for the LLM model"
    )
    llm: ModelSettings = Field(default_factory=ModelSettings, description="LLM settings")
    include_reference_texts: bool = Field(
        False, description="Send scraped reference texts to the model, not only their URLs"
    )
    prompt_source_chars: int = Field(800, description="Characters of the original article put in the prompt")

    # ── Operational Mode ───────────────────────────────────────────────────
    mock: bool = Field(False, description="Use a mock LLM client")

    # ── Reference collection & scraping ────────────────────────────────────
    reference_limit: int = Field(2, description="Maximum reference links per run")
    min_reference_links: int = Field(2, description="Links required to continue a run")
    scrape_timeout_seconds: float = Field(10.0, description="Page fetch timeout")
    scrape_max_chars: int = Field(4000, description="Maximum characters kept per reference text")
    http_timeout_seconds: float = Field(30.0, description="Timeout for content store and search calls")
    user_agent: str = Field(
        "ArticleRewriteAgent/0.1 (+https://github.com/article-rewrite-agent)",
        description="User agent for web requests"
    )

    # ── Logging ────────────────────────────────────────────────────────────
    log_level: str = Field("INFO", description="Log level")
    json_logging: bool = Field(True, description="Enable JSON logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "reference_limit", "min_reference_links", "scrape_max_chars", "prompt_source_chars"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate count limits are positive."""
        if v < 1:
            raise ValueError("Limit must be a positive integer")
        return v

    @field_validator("scrape_timeout_seconds", "http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError("Timeout must be greater than 0")
        return v

    @field_validator("laravel_api")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v


class ModelConfig:
    """Model configuration loader."""

    def __init__(self, config_path: str | Path = DEFAULT_MODEL_CONFIG_PATH):
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Load model configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Model config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}

    def get_llm_route(self, route_name: str) -> LLMRoute:
        """Get LLM route configuration."""
        if route_name not in self._config:
            raise ValueError(f"LLM route '{route_name}' not found in config")

        route_data = self._config[route_name]
        return LLMRoute(**route_data)

    def get_model_settings(self) -> ModelSettings:
        """Get model settings."""
        settings_data = self._config.get("model_settings", {})
        return ModelSettings(**settings_data)

    def get_excluded_domains(self) -> tuple[str, ...]:
        """Get domains never accepted as reference sources."""
        from .processing.link_filter import DEFAULT_EXCLUDED_DOMAINS
        domains = self._config.get("excluded_domains")
        if domains is None:
            return DEFAULT_EXCLUDED_DOMAINS
        return tuple(str(d).lower() for d in domains)


_settings: Settings | None = None
_model_config: ModelConfig | None = None


def get_settings() -> Settings:
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.llm = get_model_config().get_model_settings()
    return _settings


def get_model_config() -> ModelConfig:
    """Get model configuration."""
    global _model_config
    if _model_config is None:
        _model_config = ModelConfig()
    return _model_config


def validate_config(settings: Settings) -> bool:
    """Validate configuration completeness."""
    from .logging import get_logger
    logger = get_logger(__name__)

    try:
        if not settings.laravel_api:
            raise ValueError("LARAVEL_API is required")
        if not settings.serper_api_key:
            raise ValueError("SERPER_API_KEY is required")
        if not settings.mock and not settings.hf_api_key:
            raise ValueError("HF_API_KEY is required when not in mock mode")
        if settings.min_reference_links > settings.reference_limit:
            raise ValueError(
                f"min_reference_links ({settings.min_reference_links}) exceeds "
                f"reference_limit ({settings.reference_limit})"
            )

        # Check model config
        get_model_config().get_llm_route("rewriter")

        return True

    except Exception as e:
        logger.error("Configuration validation failed", error=str(e))
        return False
