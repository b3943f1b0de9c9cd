"""Configuration loader with environment variable override support."""

import copy
import shlex
import os
import logging
from pathlib import Path
from typing import Any

import yaml

from rdma_linkcheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "RDMA_LINKCHECK_"

_DEFAULT_CONFIG_PATHS = [
    Path(__file__).resolve().parent.parent.parent / "config.yaml",
    Path("/etc/rdma_linkcheck/config.yaml"),
    Path.home() / ".rdma_linkcheck" / "config.yaml",
]

DEFAULTS: dict[str, Any] = {
    "general": {
        "log_level": "WARNING",
        "log_file": "",
        "require_root": True,
        "max_workers": 16,
    },
    "network": {
        "devices": [],
        "sysfs_root": "/sys",
    },
    "host": {
        "chassis_serial": "",
        "hostname": "",
    },
    "mlxlink": {
        "binary": "mlxlink",
        "timeout": 60,
        "extra_args": [],
    },
    "output": {
        "format": "table",
        "json_indent": 2,
    },
    "prometheus": {
        "textfile": "",
        "metric_prefix": "rdma_linkcheck",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (base is mutated)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _apply_env_overrides(cfg: dict) -> dict:
    """Override config values with RDMA_LINKCHECK_<SECTION>__<KEY> env vars.

    Example: RDMA_LINKCHECK_MLXLINK__TIMEOUT=30 sets cfg["mlxlink"]["timeout"]=30
    """
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or "__" not in env_key:
            continue
        parts = env_key[len(ENV_PREFIX):].lower().split("__")
        node = cfg
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        # Try to preserve types (int, float, bool)
        final_key = parts[-1]
        if env_val.lower() in ("true", "false"):
            node[final_key] = env_val.lower() == "true"
        else:
            try:
                node[final_key] = int(env_val)
            except ValueError:
                try:
                    node[final_key] = float(env_val)
                except ValueError:
                    node[final_key] = env_val
    return cfg


def _positive_int(cfg: dict, section: str, key: str) -> None:
    value = cfg[section][key]
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"{section}.{key} must be an integer, got {value!r}"
        ) from None
    if number < 1:
        raise ConfigurationError(f"{section}.{key} must be >= 1, got {number}")
    cfg[section][key] = number


def _split_devices(text: str) -> list[str]:
    return [d.strip() for d in text.split(",") if d.strip()]


# list-valued keys; env overrides always arrive as scalars
_LIST_KEYS = {
    ("network", "devices"): _split_devices,
    ("mlxlink", "extra_args"): shlex.split,
}


def _list_values(cfg: dict) -> None:
    for (section, key), split in _LIST_KEYS.items():
        value = cfg[section].get(key)
        if value is None:
            cfg[section][key] = []
        elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
            cfg[section][key] = split(str(value))
        elif isinstance(value, list):
            cfg[section][key] = [str(v) for v in value]
        else:
            raise ConfigurationError(
                f"{section}.{key} must be a list, got {value!r}"
            )


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file, with env-var overrides.

    Resolution order:
    1. Explicit *path* argument
    2. RDMA_LINKCHECK_CONFIG environment variable
    3. Default search paths

    Missing keys fall back to ``DEFAULTS``.
    """
    config_path: Path | None = None

    if path:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigurationError(f"config file not found: {config_path}")
    elif "RDMA_LINKCHECK_CONFIG" in os.environ:
        config_path = Path(os.environ["RDMA_LINKCHECK_CONFIG"])
        if not config_path.is_file():
            raise ConfigurationError(
                f"config file not found (RDMA_LINKCHECK_CONFIG): {config_path}"
            )
    else:
        for p in _DEFAULT_CONFIG_PATHS:
            if p.is_file():
                config_path = p
                break

    file_cfg: dict[str, Any] = {}
    if config_path is None or not config_path.is_file():
        logger.debug("No config file found; using built-in defaults.")
    else:
        logger.info("Loading config from %s", config_path)
        try:
            with open(config_path, "r") as fh:
                file_cfg = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(file_cfg, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping")

    cfg = _deep_merge(copy.deepcopy(DEFAULTS), file_cfg)
    cfg = _apply_env_overrides(cfg)
    _positive_int(cfg, "general", "max_workers")
    _positive_int(cfg, "mlxlink", "timeout")
    _list_values(cfg)
    return cfg
