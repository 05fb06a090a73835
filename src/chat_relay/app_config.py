from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from chat_relay.models import Credentials

_PROVIDER_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o-mini",
}


@dataclass
class AppConfig:
    provider_name: str
    model: str
    host: str
    port: int
    memory_db_path: str
    request_timeout: float
    history_retention_days: int
    max_turns_per_user: int
    log_level: str
    log_consumers: list | None


def load_json_config() -> dict:
    config_path = Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def parse_app_config(config: dict, environ: dict[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ
    provider_name = str(config.get("Provider", "gemini")).strip().lower()
    if provider_name not in _PROVIDER_ENV_VARS:
        raise ValueError(f"Unknown provider: {provider_name!r}. Supported: {', '.join(_PROVIDER_ENV_VARS)}")
    port = env.get("PORT") or config.get("Port", 5000)
    return AppConfig(
        provider_name=provider_name,
        model=config.get("Model", _DEFAULT_MODELS[provider_name]),
        host=config.get("Host", "0.0.0.0"),
        port=int(port),
        memory_db_path=str(config.get("MemoryDbPath", ".chat_relay/history.db")),
        request_timeout=float(config.get("RequestTimeout", 30)),
        history_retention_days=int(config.get("HistoryRetentionDays", 0)),
        max_turns_per_user=int(config.get("MaxTurnsPerUser", 0)),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_credentials(provider_name: str, environ: dict[str, str] | None = None) -> Credentials:
    env = os.environ if environ is None else environ
    env_var = _PROVIDER_ENV_VARS.get(provider_name, "GEMINI_API_KEY")
    return Credentials(api_key=env.get(env_var, ""), env_var=env_var)
