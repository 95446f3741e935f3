"""Configuration loading for agtx.

`.env` is loaded at import time (override the location with AGTX_ENV_PATH), so
`${VAR}` references in YAML and AGTX_* variables resolve from it.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from agtx.config.loader import (
    global_config_path,
    load_config,
    load_global_config,
    project_config_path,
    resolve_config,
)
from agtx.config.schema import AgentEntry, AgtxConfig, GitConfig, PromptsConfig, TimeoutsConfig, TmuxConfig

_env_path = os.getenv("AGTX_ENV_PATH")
if _env_path:
    load_dotenv(Path(_env_path).expanduser())
else:
    load_dotenv(Path.cwd() / ".env")

__all__ = [
    "AgentEntry",
    "AgtxConfig",
    "GitConfig",
    "PromptsConfig",
    "TimeoutsConfig",
    "TmuxConfig",
    "global_config_path",
    "load_config",
    "load_global_config",
    "project_config_path",
    "resolve_config",
]
