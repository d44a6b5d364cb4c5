"""Config Provider - Single Authority for Test Run Configuration

Mirrors BrowserConfig pattern. The lifecycle code reads from here, never
decides policy.

RESPONSIBILITY:
- Load e2e.yaml once per process
- Expose an immutable ConfigSnapshot (string key -> string value)
- Fail fast when the file is unusable

DOES NOT:
- Fall back to defaults when the file is missing (that is fatal)
- Interpret keys (the orchestrator and page objects do that)

Keys consumed: browser, headless, downloads.path, traces.dir, base.url,
allure.results.dir
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from core.exceptions import ConfigLoadError


CONFIG_ENV_VAR = "E2E_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "e2e.yaml"


def _stringify(value: Any) -> str:
    """Normalise a YAML scalar to the string form callers expect."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(raw: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys.

    {"downloads": {"path": "x"}} and {"downloads.path": "x"} are equivalent.
    """
    flat: Dict[str, str] = {}
    for key, value in raw.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, prefix=f"{full_key}."))
        elif value is None:
            continue
        else:
            flat[full_key] = _stringify(value)
    return flat


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable configuration snapshot shared read-only by all workers."""
    values: Mapping[str, str] = field(default_factory=dict)
    source: Optional[str] = None

    def __post_init__(self):
        # Freeze the mapping so no worker can mutate shared state
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get_property(self, key: str) -> Optional[str]:
        """Return the raw string value for key, or None if absent."""
        return self.values.get(key)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Only a case-insensitive "true" is truthy."""
        value = self.values.get(key)
        if value is None:
            return default
        return value.strip().lower() == "true"

    def as_dict(self) -> Dict[str, str]:
        return dict(self.values)


class ConfigProvider:
    """Process-wide, load-once configuration authority.

    Usage:
        config = ConfigProvider.get()
        browser = config.get_property("browser")

    Tests should build snapshots with ConfigProvider.load(path) or
    ConfigSnapshot({...}) and inject them, then call reset().
    """

    _snapshot: Optional[ConfigSnapshot] = None
    _path_override: Optional[Path] = None
    _lock = Lock()

    @classmethod
    def get(cls) -> ConfigSnapshot:
        """Get the cached snapshot, loading it on first access."""
        if cls._snapshot is None:
            with cls._lock:
                if cls._snapshot is None:
                    cls._snapshot = cls.load(cls.resolve_path())
        return cls._snapshot

    @classmethod
    def reset(cls) -> None:
        """Drop the cached snapshot (for testing)."""
        with cls._lock:
            cls._snapshot = None

    @classmethod
    def use_path(cls, path) -> None:
        """Pin the config file for this process; None unpins.

        Drops any cached snapshot so the next get() loads from the new path.
        """
        with cls._lock:
            cls._path_override = Path(path) if path is not None else None
            cls._snapshot = None

    @classmethod
    def resolve_path(cls) -> Path:
        """use_path() wins over E2E_CONFIG, which wins over config/e2e.yaml."""
        if cls._path_override is not None:
            return cls._path_override
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            return Path(override)
        return DEFAULT_CONFIG_PATH

    @staticmethod
    def load(path) -> ConfigSnapshot:
        """Load a snapshot from a YAML file.

        Raises:
            ConfigLoadError: file missing, unreadable, malformed, or not a mapping
        """
        config_path = Path(path)

        if not config_path.exists():
            raise ConfigLoadError(str(config_path), "Config file not found")

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoadError(str(config_path), f"Failed to load config: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigLoadError(
                str(config_path),
                f"Config root must be a mapping, got {type(raw).__name__}"
            )

        snapshot = ConfigSnapshot(values=_flatten(raw), source=str(config_path))
        logging.info(f"Loaded e2e config from {config_path} ({len(snapshot.values)} keys)")
        return snapshot
