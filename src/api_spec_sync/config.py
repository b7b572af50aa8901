"""Sync pass configuration."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from api_spec_sync.model.base import NEUTRAL_TAG

DEFAULT_SPEC_PATH = Path("api-spec.yaml")


class ConfigError(Exception):
    """Raised when a config file cannot be read or validated."""


class SyncConfig(BaseModel):
    """Knobs for one reconciliation pass."""

    verify_all_responses: bool = False  # ignore the per-operation opt-in
    uppercase_tags: bool = True  # normalize OpenAPI tags of adopted operations
    default_tag: str = NEUTRAL_TAG


def load_config(file_path: Path | None) -> SyncConfig:
    """Load a SyncConfig from a YAML file. Missing file or path gives defaults."""
    if file_path is None or not file_path.exists():
        return SyncConfig()
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{file_path}: invalid YAML: {e}") from e
    try:
        return SyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{file_path}: invalid sync config: {e}") from e
