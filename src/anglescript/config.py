"""
Engine configuration.

Settings are read from a YAML file:

    output_prefix: "Output: "
    build_started: "Build started..."
    show_source: true

Keys left out keep their defaults. When no path is given, the file named
by the ANGLESCRIPT_CONFIG environment variable is used, if set.
"""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_ENV_VAR = "ANGLESCRIPT_CONFIG"


@dataclass
class EngineConfig:
    """Messages and reporting options of an Engine."""

    # Phase messages
    build_started: str = "Build started..."
    build_finished: str = "Build finished..."
    executing: str = "Executing..."
    done_executing: str = "Done executing..."

    # Prepended to every value a program outputs
    output_prefix: str = "Output: "

    # Error reporting
    show_source: bool = True
    max_diagnostics: int = 20

    def format_output(self, value: Any) -> str:
        return f"{self.output_prefix}{value}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """
        Create a config from a mapping.

        Raises ValueError for unknown keys or values of the wrong type.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"unknown config key(s): {', '.join(unknown)}")

        defaults = cls()
        for key, value in data.items():
            expected = type(getattr(defaults, key))
            if expected is int and isinstance(value, bool):
                raise ValueError(f"config key '{key}' must be int, got bool")
            if not isinstance(value, expected):
                raise ValueError(
                    f"config key '{key}' must be {expected.__name__}, "
                    f"got {type(value).__name__}"
                )
        return cls(**data)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fp:
            yaml.safe_dump(self.to_dict(), fp, sort_keys=False)


def load_config(path: Union[str, Path, None] = None) -> EngineConfig:
    """
    Load an EngineConfig from YAML.

    Falls back to $ANGLESCRIPT_CONFIG, then to the defaults.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return EngineConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as fp:
        data: Optional[Dict[str, Any]] = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config must be a mapping: {config_path}")
    return EngineConfig.from_dict(data)
