import os
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel

from agtx.config.schema import AgtxConfig
from agtx.constants import AGTX_DIR, PROJECT_CONFIG_FILE
from agtx.logging_config import get_logger
from agtx.utils import deep_merge, expand_env_vars

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_GLOBAL_CONFIG_PATH = Path("~/.config/agtx/config.yml")


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Optional[Path]) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in {} at {}: {}", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)
        elif isinstance(field_value, dict):
            for key, value in field_value.items():
                if isinstance(value, BaseModel):
                    _warn_unknown_keys(value, f"{path}.{field_name}.{key}", config_path)


def read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping, returning {} for missing or unreadable files."""
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read config file {}: {}", path, e)
        return {}

    if not isinstance(raw, dict):
        logger.warning("Ignoring config file {}: top level is not a mapping", path)
        return {}
    return raw


def load_config(path: Path, model_class: Type[T]) -> T:
    """Load and validate configuration from a single YAML file.

    Args:
        path: Path to the YAML file.
        model_class: The Pydantic model class to use for validation.

    Returns:
        The validated configuration model (defaults when the file is missing).
    """
    expanded = expand_env_vars(read_yaml(path))
    model = model_class.model_validate(expanded)
    _warn_unknown_keys(model, "root", path)
    return model


def global_config_path() -> Path:
    """Resolve the global config path, honoring AGTX_CONFIG_PATH."""
    override = os.getenv("AGTX_CONFIG_PATH")
    return Path(override).expanduser() if override else DEFAULT_GLOBAL_CONFIG_PATH.expanduser()


def project_config_path(project_root: Path) -> Path:
    """Project-level config lives beside the worktrees in <root>/.agtx/."""
    return project_root / AGTX_DIR / PROJECT_CONFIG_FILE


def load_global_config(path: Optional[Path] = None) -> AgtxConfig:
    """Load global-level configuration."""
    return load_config(path or global_config_path(), AgtxConfig)


def resolve_config(project_root: Path, global_path: Optional[Path] = None) -> AgtxConfig:
    """Load global config and deep-merge the project's overrides on top."""
    global_file = global_path or global_config_path()
    project_file = project_config_path(project_root)
    merged = deep_merge(read_yaml(global_file), read_yaml(project_file))
    model = AgtxConfig.model_validate(expand_env_vars(merged))
    _warn_unknown_keys(model, "root", project_file if project_file.exists() else global_file)
    logger.debug("Resolved config for {} (global={}, project={})", project_root, global_file, project_file)
    return model
