import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from actionsdk.application.config_models import HarnessConfig, RuntimeSettings
from actionsdk.domain.constants import (
    ALLOW_MULTIPLE_WRITES_ENV,
    DEFAULT_CONFIG_PATH,
    LOG_LEVEL_ENV,
)
from actionsdk.domain.errors import ActionSDKError


class ConfigLoadError(ActionSDKError):
    def __init__(self, message: str, *, path: Path | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


def runtime_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    """Read runtime settings from the process environment."""
    env = os.environ if environ is None else environ

    raw: dict[str, Any] = {}
    if env.get(LOG_LEVEL_ENV):
        raw["log_level"] = env[LOG_LEVEL_ENV]
    if env.get(ALLOW_MULTIPLE_WRITES_ENV):
        raw["allow_multiple_writes"] = env[ALLOW_MULTIPLE_WRITES_ENV]

    try:
        return RuntimeSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid runtime settings in environment: {e}", cause=e) from e


def _defaults() -> dict[str, Any]:
    return HarnessConfig().model_dump()


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge mapping keys. For non-dict values, overlay wins.

    Secrets from the user file and the project file are therefore combined
    by name rather than replaced wholesale.
    """
    merged: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _deep_merge(merged[k], v)  # type: ignore[arg-type]
        else:
            merged[k] = v
    return merged


def load_yaml_mapping(path: Path, *, missing_ok: bool = True) -> dict[str, Any]:
    """
    Load YAML file and ensure root is a mapping.

    JSON is valid YAML, so JSON files load here as well.
    """
    # Read directly rather than checking existence first.
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        if missing_ok:
            return {}
        raise ConfigLoadError("File not found", path=path, cause=e) from e
    except OSError as e:  # pragma: no cover
        raise ConfigLoadError("Failed to read file", path=path, cause=e) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigLoadError("Malformed YAML", path=path, cause=e) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigLoadError("YAML root must be a mapping", path=path)

    return data


def load_config(*, project_root: Path | None = None, user_home: Path | None = None) -> dict[str, Any]:
    """
    Load and merge harness config with precedence (highest wins):
    CLI args (handled in CLI) > project > user > defaults.

    Files:
      - user:    user_home/.actionsdk/config.yml
      - project: project_root/.actionsdk/config.yml
    """
    project_root = project_root or Path.cwd()
    user_home = user_home or Path.home()

    cfg: dict[str, Any] = _defaults()
    cfg = _deep_merge(cfg, load_yaml_mapping(user_home / DEFAULT_CONFIG_PATH))
    cfg = _deep_merge(cfg, load_yaml_mapping(project_root / DEFAULT_CONFIG_PATH))
    return cfg


def load_harness_config(*, project_root: Path | None = None, user_home: Path | None = None) -> HarnessConfig:
    """Load merged config and validate it into a HarnessConfig."""
    cfg = load_config(project_root=project_root, user_home=user_home)
    try:
        return HarnessConfig.model_validate(cfg)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid harness config: {e}", cause=e) from e
