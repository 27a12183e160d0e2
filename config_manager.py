"""
Configuration management for the quota gate.
Handles loading, validating, and providing access to application settings.

Precedence: built-in defaults < JSON config file < environment variables.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

# Hosted Redis integrations expose the REST endpoint under different names
STORE_URL_ENV_VARS = ("UPSTASH_REDIS_REST_URL", "KV_REST_API_URL", "REDIS_REST_URL", "KV_URL")
STORE_TOKEN_ENV_VARS = ("UPSTASH_REDIS_REST_TOKEN", "KV_REST_API_TOKEN", "REDIS_REST_TOKEN")


@dataclass
class StoreConfig:
    """Shared store connection settings."""
    url: str
    token: str
    timeout: float


@dataclass
class LLMConfig:
    """LLM configuration settings."""
    provider: str
    api_key: str
    base_url: str
    model: str
    max_tokens: int
    timeout: int


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    allowed_origins: List[str]
    require_premium: bool


@dataclass
class LimitsConfig:
    """Burst and weekly quota limits."""
    anonymous_weekly_limit: int
    registered_weekly_limit: int
    burst_limit: int
    burst_window_seconds: int


@dataclass
class PremiumSettings:
    """Premium activation settings."""
    token_secret: str
    codes: List[str]
    code_prefix: str
    token_ttl_days: int


@dataclass
class GenerationSettings:
    """Generation input limits."""
    max_messages: int
    max_content_chars: int


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "gate_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self._merge_config(json.load(f))
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "store": {
                "url": "",
                "token": "",
                "timeout": 5.0
            },
            "llm": {
                "provider": "anthropic",
                "api_key": "",
                "base_url": "",
                "model": "claude-sonnet-4-20250514",
                "max_tokens": 2000,
                "timeout": 60
            },
            "app": {
                "host": "0.0.0.0",
                "port": 3000,
                "debug": False,
                "allowed_origins": [],
                "require_premium": False
            },
            "limits": {
                "anonymous_weekly_limit": 10,
                "registered_weekly_limit": 15,
                "burst_limit": 10,
                "burst_window_seconds": 60
            },
            "premium": {
                "token_secret": "",
                "codes": [],
                "code_prefix": "PL",
                "token_ttl_days": 365
            },
            "generation": {
                "max_messages": 10,
                "max_content_chars": 5000
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # Store settings
        store_url = _first_env(STORE_URL_ENV_VARS)
        if store_url:
            self._config["store"]["url"] = store_url

        store_token = _first_env(STORE_TOKEN_ENV_VARS)
        if store_token:
            self._config["store"]["token"] = store_token

        if os.getenv("STORE_TIMEOUT"):
            self._config["store"]["timeout"] = float(os.getenv("STORE_TIMEOUT"))

        # LLM settings
        if os.getenv("LLM_PROVIDER"):
            self._config["llm"]["provider"] = os.getenv("LLM_PROVIDER")

        api_key = os.getenv("LLM_API_KEY") or os.getenv("ANTHROPIC_API_KEY")
        if api_key:
            self._config["llm"]["api_key"] = api_key

        if os.getenv("LLM_BASE_URL"):
            self._config["llm"]["base_url"] = os.getenv("LLM_BASE_URL")

        if os.getenv("LLM_MODEL"):
            self._config["llm"]["model"] = os.getenv("LLM_MODEL")

        if os.getenv("LLM_MAX_TOKENS"):
            self._config["llm"]["max_tokens"] = int(os.getenv("LLM_MAX_TOKENS"))

        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("ALLOWED_ORIGINS"):
            self._config["app"]["allowed_origins"] = _split_list(os.getenv("ALLOWED_ORIGINS"))

        if os.getenv("REQUIRE_PREMIUM"):
            self._config["app"]["require_premium"] = os.getenv("REQUIRE_PREMIUM").lower() == "true"

        # Limits
        if os.getenv("ANONYMOUS_WEEKLY_LIMIT"):
            self._config["limits"]["anonymous_weekly_limit"] = int(os.getenv("ANONYMOUS_WEEKLY_LIMIT"))

        if os.getenv("REGISTERED_WEEKLY_LIMIT"):
            self._config["limits"]["registered_weekly_limit"] = int(os.getenv("REGISTERED_WEEKLY_LIMIT"))

        if os.getenv("BURST_LIMIT"):
            self._config["limits"]["burst_limit"] = int(os.getenv("BURST_LIMIT"))

        # Premium settings
        if os.getenv("PREMIUM_TOKEN_SECRET"):
            self._config["premium"]["token_secret"] = os.getenv("PREMIUM_TOKEN_SECRET")

        if os.getenv("PREMIUM_CODES"):
            self._config["premium"]["codes"] = _split_list(os.getenv("PREMIUM_CODES"))

        if os.getenv("PREMIUM_CODE_PREFIX"):
            self._config["premium"]["code_prefix"] = os.getenv("PREMIUM_CODE_PREFIX")

    def get_store_config(self) -> StoreConfig:
        """Get shared store configuration."""
        store_config = self._config["store"]
        return StoreConfig(
            url=store_config["url"],
            token=store_config["token"],
            timeout=float(store_config["timeout"])
        )

    def get_llm_config(self) -> LLMConfig:
        """Get LLM configuration."""
        llm_config = self._config["llm"]
        return LLMConfig(
            provider=llm_config["provider"],
            api_key=llm_config["api_key"],
            base_url=llm_config["base_url"],
            model=llm_config["model"],
            max_tokens=llm_config["max_tokens"],
            timeout=llm_config["timeout"]
        )

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            allowed_origins=list(app_config["allowed_origins"]),
            require_premium=app_config["require_premium"]
        )

    def get_limits_config(self) -> LimitsConfig:
        """Get quota limits configuration."""
        limits = self._config["limits"]
        return LimitsConfig(
            anonymous_weekly_limit=limits["anonymous_weekly_limit"],
            registered_weekly_limit=limits["registered_weekly_limit"],
            burst_limit=limits["burst_limit"],
            burst_window_seconds=limits["burst_window_seconds"]
        )

    def get_premium_settings(self) -> PremiumSettings:
        """Get premium activation configuration."""
        premium = self._config["premium"]
        return PremiumSettings(
            token_secret=premium["token_secret"],
            codes=list(premium["codes"]),
            code_prefix=premium["code_prefix"],
            token_ttl_days=premium["token_ttl_days"]
        )

    def get_generation_settings(self) -> GenerationSettings:
        """Get generation input limits."""
        generation = self._config["generation"]
        return GenerationSettings(
            max_messages=generation["max_messages"],
            max_content_chars=generation["max_content_chars"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_store_config() -> StoreConfig:
    """Get shared store configuration."""
    return config_manager.get_store_config()


def get_llm_config() -> LLMConfig:
    """Get LLM configuration."""
    return config_manager.get_llm_config()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_limits_config() -> LimitsConfig:
    """Get quota limits configuration."""
    return config_manager.get_limits_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()
