import copy
import os
from pathlib import Path
from typing import Any

import tomli
import tomli_w


class ConfigError(Exception):
    pass


def get_cache_dir() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".cache"
    return base / "demolsp"


def get_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    return base / "demolsp"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_log_dir() -> Path:
    return get_cache_dir() / "log"


DEFAULT_CONFIG: dict[str, Any] = {
    "server": {
        "log_level": "info",
    },
    "diagnostics": {
        "max_line_length": 80,
        "source": "demo-lsp",
    },
}


def load_config() -> dict[str, Any]:
    config_path = get_config_path()
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        with open(config_path, "rb") as f:
            try:
                user_config = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigError(f"Invalid config file {config_path}: {e}")
        _merge_config(config, user_config)

    return config


def save_config(config: dict[str, Any]) -> None:
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)


def _merge_config(base: dict, override: dict) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_config(base[key], value)
        else:
            base[key] = value


def get_max_line_length(config: dict) -> int:
    value = config.get("diagnostics", {}).get("max_line_length", 80)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ConfigError(f"diagnostics.max_line_length must be a non-negative integer, got {value!r}")
    return value


def get_diagnostic_source(config: dict) -> str:
    return str(config.get("diagnostics", {}).get("source", "demo-lsp"))


def get_log_level(config: dict) -> str:
    return str(config.get("server", {}).get("log_level", "info")).upper()
