"""Configuration loading from an optional YAML file and environment variables."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

from json_file_target.models import Level, parse_level

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_list(value) -> tuple:
    """Comma-separated string or YAML list -> tuple of stripped strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return tuple(str(item).strip() for item in items if str(item).strip())


@dataclass(frozen=True)
class TargetConfig:
    log_file: str = "./logs/app.log"
    levels: tuple[Level, ...] = ()
    categories: tuple[str, ...] = ()
    except_: tuple[str, ...] = ()
    log_vars: tuple[str, ...] = ()
    export_interval: int = 1000
    enable_rotation: bool = True
    max_file_size_kb: int = 10240  # 10 MB
    max_log_files: int = 5
    application: str = "app"
    include_context: bool = True
    utc_timestamps: bool = False


# env var -> (config field, parser)
ENV_VARS = {
    "JSON_LOG_FILE": ("log_file", str),
    "JSON_LOG_LEVELS": ("levels", _parse_list),
    "JSON_LOG_CATEGORIES": ("categories", _parse_list),
    "JSON_LOG_EXCEPT": ("except_", _parse_list),
    "JSON_LOG_VARS": ("log_vars", _parse_list),
    "EXPORT_INTERVAL": ("export_interval", int),
    "ENABLE_ROTATION": ("enable_rotation", _parse_bool),
    "MAX_FILE_SIZE_KB": ("max_file_size_kb", int),
    "MAX_LOG_FILES": ("max_log_files", int),
    "APP_ID": ("application", str),
    "INCLUDE_CONTEXT": ("include_context", _parse_bool),
    "UTC_TIMESTAMPS": ("utc_timestamps", _parse_bool),
}

_YAML_PARSERS = {
    "levels": _parse_list,
    "categories": _parse_list,
    "except": _parse_list,
    "except_": _parse_list,
    "log_vars": _parse_list,
    "export_interval": int,
    "enable_rotation": _parse_bool,
    "max_file_size_kb": int,
    "max_log_files": int,
    "include_context": _parse_bool,
    "utc_timestamps": _parse_bool,
}


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | None = None, environ=None) -> TargetConfig:
    """Build TargetConfig from defaults, then the YAML file, then env vars."""
    env = os.environ if environ is None else environ
    known = {f.name for f in fields(TargetConfig)}
    values: dict = {}

    for key, raw in load_yaml_config(path).items():
        name = "except_" if key == "except" else key
        if name not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        parser = _YAML_PARSERS.get(key, str)
        values[name] = parser(raw)

    for var, (name, parser) in ENV_VARS.items():
        if var in env:
            values[name] = parser(env[var])

    if "levels" in values:
        values["levels"] = tuple(parse_level(name) for name in values["levels"])

    config = TargetConfig(**values)
    if config.max_log_files < 1:
        raise ValueError("max_log_files must be at least 1")
    return config
