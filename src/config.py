"""
Configuration for Phish-Lens

Settings come from constructor arguments or PHISHLENS_* environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from error_handling import ConfigError, error_handler
from llm_service import GeminiService, OllamaService, TextGenerationService


PROVIDERS = ("ollama", "gemini")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_MODELS = {
    "ollama": "phi4-mini",
    "gemini": "gemini-1.5-flash",
}


@dataclass
class AnalyzerConfig:
    provider: str = "ollama"
    model: Optional[str] = None
    ollama_url: str = "http://localhost:11434"
    gemini_api_key: str = ""
    timeout: int = 90
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Read settings from the environment, using defaults for unset variables"""
        timeout_value = os.getenv("PHISHLENS_TIMEOUT", "90").strip()
        try:
            timeout = int(timeout_value)
        except ValueError as e:
            raise ConfigError(f"PHISHLENS_TIMEOUT must be a whole number of seconds, got {timeout_value!r}") from e

        return cls(
            provider=os.getenv("PHISHLENS_PROVIDER", "ollama").strip().lower(),
            model=os.getenv("PHISHLENS_MODEL", "").strip() or None,
            ollama_url=os.getenv("OLLAMA_URL", "http://localhost:11434").strip(),
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            timeout=timeout,
            log_level=os.getenv("PHISHLENS_LOG_LEVEL", "INFO").strip().upper(),
        )

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, "")

    def validate(self):
        if self.provider not in PROVIDERS:
            raise ConfigError(f"Unknown provider {self.provider!r}, expected one of {', '.join(PROVIDERS)}")
        if self.timeout <= 0:
            raise ConfigError("Timeout must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level!r}")
        if self.provider == "gemini" and not self.gemini_api_key:
            raise ConfigError("GEMINI_API_KEY is required for the gemini provider")


def create_service(config: AnalyzerConfig) -> TextGenerationService:
    """Build the text-generation service selected by the configuration"""
    config.validate()
    error_handler.set_level(config.log_level)

    if config.provider == "gemini":
        service = GeminiService(config.gemini_api_key, config.resolved_model, config.timeout)
    else:
        service = OllamaService(config.ollama_url, config.resolved_model, config.timeout)

    error_handler.logger.info(f"Using {service.name} model '{service.model}'")
    return service
