"""Config store: settings from env, overlaid by an optional YAML/JSON file."""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Sections whose keys map onto settings fields without a prefix.
_BARE_SECTIONS = ("app", "economy")


def flatten_sections(data: dict[str, Any]) -> dict[str, Any]:
    """Turn a sectioned config file into flat settings keys.

    ``economy: {hint_cost: 2}`` becomes ``hint_cost``; any other section is
    joined with an underscore, so ``rate_limit: {enabled: false}`` becomes
    ``rate_limit_enabled``. Top-level scalars pass through.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            prefix = "" if key in _BARE_SECTIONS else f"{key}_"
            for inner, inner_value in flatten_sections(value).items():
                flat[f"{prefix}{inner}"] = inner_value
        else:
            flat[key] = value
    return flat


def read_config_file(path: Path) -> dict[str, Any]:
    """Flat dict from a YAML or JSON file. A missing or unreadable file yields {}."""
    if not path.exists():
        logger.debug("Config file not found: %s (using env/defaults)", path)
        return {}
    try:
        raw = path.read_text()
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        elif path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            logger.warning("Config file must be .yaml, .yml or .json: %s", path)
            return {}
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        logger.warning("Could not load config file %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file must contain a mapping; got %s", type(data).__name__)
        return {}
    return flatten_sections(data)


class ConfigStore:
    """Builds Settings once: defaults, then env, then the config file."""

    def __init__(self, SettingsCls: type, config_file_path: Optional[str] = None):
        self._SettingsCls = SettingsCls
        self._file_path: Optional[Path] = None
        if config_file_path:
            self._file_path = Path(config_file_path).expanduser().resolve()
        self._current: Optional[Any] = None
        self._lock = threading.RLock()

    def _build(self) -> Any:
        env_dict = self._SettingsCls().model_dump()
        file_dict = read_config_file(self._file_path) if self._file_path else {}
        unknown = sorted(set(file_dict) - set(env_dict))
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        known = {k: v for k, v in file_dict.items() if k in env_dict}
        return self._SettingsCls(**{**env_dict, **known})

    def load_initial(self) -> None:
        with self._lock:
            self._current = self._build()
            if self._file_path and self._file_path.exists():
                logger.info("Loaded config file: %s", self._file_path)

    def get_settings(self) -> Any:
        with self._lock:
            if self._current is None:
                self.load_initial()
            return self._current
