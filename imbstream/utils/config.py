import copy
import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, TypeVar

from imbstream.constants import DEFAULT_CONFIG_FILE
from imbstream.utils.file_utils import load_json, save_json

T = TypeVar('T')

_global_config = None

class ConfigProvider(ABC):
    @abstractmethod
    def get_config_value(self, section: str, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def get_section(self, section: str) -> Dict[str, Any]:
        pass

class DictConfigProvider(ConfigProvider):
    def __init__(self, config_data: Dict[str, Any]) -> None:
        self._config = config_data

    def get_config_value(self, section: str, key: str, default: Any = None) -> Any:
        if section not in self._config:
            return default
        return self._config[section].get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        return self._config.get(section, {}).copy()

class EnvConfigProvider(ConfigProvider):
    """Reads ``IMBSTREAM_<SECTION>_<KEY>`` environment variables as JSON-ish scalars."""

    prefix = "IMBSTREAM"

    def _env_name(self, section: str, key: str) -> str:
        return f"{self.prefix}_{section}_{key}".upper()

    def get_config_value(self, section: str, key: str, default: Any = None) -> Any:
        raw = os.environ.get(self._env_name(section, key))
        if raw is None:
            return default
        return _parse_scalar(raw)

    def get_section(self, section: str) -> Dict[str, Any]:
        head = f"{self.prefix}_{section}_".upper()
        return {
            name[len(head):].lower(): _parse_scalar(value)
            for name, value in os.environ.items()
            if name.startswith(head)
        }

def _parse_scalar(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null"):
        return None
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            pass
    return raw

class Config:
    def __init__(self) -> None:
        self._config = self._get_default_config()
        self._providers: List[ConfigProvider] = [
            EnvConfigProvider(),
            DictConfigProvider(self._config)
        ]

    def _get_default_config(self) -> Dict[str, Any]:
        from imbstream.constants import DEFAULT_CONFIG
        return copy.deepcopy(DEFAULT_CONFIG)

    def get(self, section: Optional[str] = None, key: Optional[str] = None, default: Optional[T] = None) -> Union[Dict[str, Any], Any, T]:
        if section is None:
            return copy.deepcopy(self._config)
        if key is None:
            if section not in self._config:
                return default
            merged = self._config[section].copy()
            merged.update(self._providers[0].get_section(section))
            return merged
        for provider in self._providers:
            value = provider.get_config_value(section, key, None)
            if value is not None:
                return value
        if section not in self._config:
            return default
        return self._config[section].get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = value

    def get_component_config(self, component_name: str) -> Dict[str, Any]:
        return self.get(component_name, default={})

    def load_from_file(self, file_path: Union[str, Path]) -> None:
        try:
            file_config = load_json(file_path)
        except (OSError, ValueError) as e:
            logging.warning(f"Failed to load config from {file_path}: {str(e)}")
            return
        for section, section_values in file_config.items():
            if isinstance(section_values, dict):
                if section not in self._config:
                    self._config[section] = {}
                for key, value in section_values.items():
                    self._config[section][key] = value
            else:
                self._config[section] = section_values

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        save_json(self._config, file_path)

    @contextmanager
    def component_context(self, component_name: str):
        component_config = self.get_component_config(component_name)
        yield component_config

def get_config() -> Config:
    global _global_config
    if _global_config is None:
        _global_config = Config()
        default_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
        if os.path.exists(default_path):
            _global_config.load_from_file(default_path)
    return _global_config

def set_global_config(config: Config) -> None:
    global _global_config
    _global_config = config

def load_config(file_path: Union[str, Path]) -> Config:
    config = Config()
    config.load_from_file(file_path)
    return config
