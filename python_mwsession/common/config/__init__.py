from .models import AppConfig, ClientConfig, LoggingConfig
from pathlib import Path
from typing import Optional
import tomllib

def _deep_update(base: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _map_toml_config(data: dict) -> dict:
    mapped: dict = {}

    if "name" in data:
        mapped["name"] = data["name"]

    client_cfg = data.get("client", {})
    if client_cfg:
        mapped["client"] = {
            key: client_cfg[key]
            for key in ClientConfig.model_fields
            if key in client_cfg
        }

    logging_cfg = data.get("logging", {})
    if logging_cfg:
        mapped.setdefault("logging", {})
        if "level" in logging_cfg:
            mapped["logging"]["level"] = str(logging_cfg["level"]).upper()
        if "format" in logging_cfg:
            mapped["logging"]["format"] = str(logging_cfg["format"]).lower()

    return mapped


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    if config_path is None:
        candidates = [
            Path.cwd() / "config.toml",
            Path(__file__).resolve().parents[2] / "config.toml",
        ]
        config_path = next((p for p in candidates if p.exists()), None)
    if not config_path or not config_path.exists():
        return AppConfig()

    with open(config_path, "rb") as f:
        raw = tomllib.load(f)

    base = AppConfig().model_dump()
    mapped = _map_toml_config(raw)
    merged = _deep_update(base, mapped)
    return AppConfig.model_validate(merged)


settings = load_config()

def get_settings() -> AppConfig:
    return settings

def update_settings(new_settings: AppConfig):
    global settings
    settings = new_settings
