import os
from pathlib import Path

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "resource_toolkit.yml"
CONFIG_ENV_VAR = "RIT_CONFIG"


class RITConfig:
    def __init__(self, data):
        self.paths = data.get("paths", {})
        self.logging = data.get("logging", {})
        self.matching = data.get("matching", {})
        self.batch = data.get("batch", {})
        self.jobs = data.get("jobs", {})
        self.downloads = data.get("downloads", {})
        self.debug = data.get("debug", False)

    def batch_size(self, kind: str, default: int) -> int:
        return int(self.batch.get(kind, default))


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_PATH


def load_config() -> 'RITConfig':
    path = config_path()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return RITConfig(data)

_config_cache = None

def get_config() -> 'RITConfig':
    global _config_cache
    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache
