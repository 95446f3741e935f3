"""Small helpers shared across agtx modules."""

from __future__ import annotations

import os
import re

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def expand_env_vars(config: object) -> object:
    """Recursively expand environment variables in config.

    Replaces ${VAR} patterns with environment variable values. Unknown
    variables are left as-is.
    """
    if isinstance(config, dict):
        return {k: expand_env_vars(v) for k, v in config.items()}
    if isinstance(config, list):
        return [expand_env_vars(item) for item in config]
    if isinstance(config, str):

        def replace_env_var(match: re.Match[str]) -> str:
            env_var = match.group(1)
            return os.getenv(env_var, match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_env_var, config)
    return config


def deep_merge(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    """Merge `override` into a copy of `base`, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def slugify(text: str, max_length: int) -> str:
    """Lowercase, dash-separated ASCII slug of `text`, truncated to `max_length`."""
    slug = _SLUG_INVALID.sub("-", text.lower()).strip("-")
    return slug[:max_length].rstrip("-")
