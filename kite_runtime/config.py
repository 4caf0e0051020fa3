"""Kite config loader.

Reads kite.config (YAML) from the project directory.
Caches result after first load. Call _reset_config() in tests.
"""

import copy
import os
import yaml

from kite.parser import max_depth_ceiling
from kite_runtime.exceptions import KiteConfigError

_config = None

CONFIG_FILENAME = "kite.config"

DEFAULTS = {
    "parser": {
        "strict_blocks": False,
        "max_depth": 100,
    },
    "repl": {
        "prompt": ">> ",
    },
    "log": {
        "level": "WARNING",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def get_config(config_dir: str | None = None) -> dict:
    """Load and return the Kite config, caching after first call."""
    global _config
    if _config is not None:
        return _config

    if config_dir is None:
        config_dir = os.getcwd()

    config_path = os.path.join(config_dir, CONFIG_FILENAME)

    if os.path.exists(config_path):
        with open(config_path) as f:
            try:
                user_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise KiteConfigError(f"invalid {CONFIG_FILENAME}: {e}") from e
        if user_config and isinstance(user_config, dict):
            _config = _deep_merge(copy.deepcopy(DEFAULTS), user_config)
        else:
            _config = copy.deepcopy(DEFAULTS)
    else:
        _config = copy.deepcopy(DEFAULTS)

    return _config


def parser_options(config: dict) -> dict:
    """Keyword arguments for ``kite.parser.Parser`` from the ``parser`` section.

    Raises KiteConfigError when a value has the wrong type, or when
    ``max_depth`` is below 1 or deeper than the recursion limit allows.
    """
    section = config.get("parser") or {}
    if not isinstance(section, dict):
        raise KiteConfigError(f"parser: expected a mapping, got {section!r}")

    strict_blocks = section.get("strict_blocks", False)
    if not isinstance(strict_blocks, bool):
        raise KiteConfigError(f"parser.strict_blocks must be true or false, got {strict_blocks!r}")

    max_depth = section.get("max_depth", DEFAULTS["parser"]["max_depth"])
    # bool is an int subclass; `max_depth: yes` is a typo, not 1.
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise KiteConfigError(f"parser.max_depth must be an integer, got {max_depth!r}")
    ceiling = max_depth_ceiling()
    if not 1 <= max_depth <= ceiling:
        raise KiteConfigError(f"parser.max_depth must be between 1 and {ceiling}, got {max_depth}")

    return {"strict_blocks": strict_blocks, "max_depth": max_depth}


def _reset_config():
    """Clear cached config. Call this in tests."""
    global _config
    _config = None
