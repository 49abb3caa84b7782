from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class CbmConfig:
    """Configuration options for the text-to-model pipeline."""

    paragraph_fallback: bool = False
    disabled_rules: List[str] = field(default_factory=list)
    terminal_text: str = "."
    log_level: str = "WARNING"

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(CbmConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "disabled_rules" in kwargs:
        value = kwargs["disabled_rules"]
        if isinstance(value, str):
            value = [value]
        kwargs["disabled_rules"] = [str(item) for item in value or []]
    return kwargs


def config_from_dict(data: Mapping[str, Any] | None) -> CbmConfig:
    """Build a CbmConfig from a dictionary-like input."""
    if data is None:
        return CbmConfig()
    return CbmConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> CbmConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> CbmConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return CbmConfig()
    return config_from_yaml(path)
