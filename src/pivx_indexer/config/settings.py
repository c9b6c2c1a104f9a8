# File: src/pivx_indexer/config/settings.py

import copy
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from ..utils.config import Config

ENV_PREFIX = "PIVX_INDEXER_"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "rpc": {
        "url": f"http://{Config.RPC_HOST}:{Config.RPC_PORT}",
        "username": Config.RPC_USERNAME,
        "password": Config.RPC_PASSWORD,
        "timeout": None
    },
    "index": {
        "database_path": Config.DATABASE_PATH,
        "blocks_dir": None,
        "regular_batch_size": Config.REGULAR_BATCH_SIZE,
        "indexed_batch_size": Config.INDEXED_BATCH_SIZE
    },
    "api": {
        "host": "127.0.0.1",
        "port": 8000
    },
    "logging": {
        "log_dir": "logs",
        "log_level": "INFO"
    }
}

def _merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base

class IndexerSettings:
    """Settings read from a YAML file, layered over the defaults.

    Values from the file win over the defaults, and environment variables
    named PIVX_INDEXER_<SECTION>_<KEY> (e.g. PIVX_INDEXER_RPC_PASSWORD) win
    over both. Environment values are parsed as YAML scalars, so numbers
    stay numbers. A file with the defaults is written on first use.
    """

    def __init__(
        self,
        config_path: str = "config/indexer.yaml",
        environ: Optional[Mapping[str, str]] = None
    ):
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.file_config = self._load_file()
        self.config = _merge(copy.deepcopy(DEFAULT_SETTINGS), self.file_config)
        self._apply_environment()

    def _load_file(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            self._save(DEFAULT_SETTINGS)
            return copy.deepcopy(DEFAULT_SETTINGS)

        with open(self.config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _save(self, config: Mapping[str, Any]) -> None:
        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.safe_dump(dict(config), f, default_flow_style=False)

    def _apply_environment(self) -> None:
        for section, values in self.config.items():
            if not isinstance(values, dict):
                continue
            for key in values:
                name = f"{ENV_PREFIX}{section}_{key}".upper()
                if name in self.environ:
                    values[key] = yaml.safe_load(self.environ[name])

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as "rpc.url"."""
        value: Any = self.config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return default if value is None else value

    def update(self, key: str, value: Any) -> None:
        """Set a dotted key and persist it to the settings file."""
        *sections, name = key.split('.')
        for target in (self.config, self.file_config):
            for section in sections:
                target = target.setdefault(section, {})
            target[name] = value
        self._save(self.file_config)
