"""Unit tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from agtx.config import AgtxConfig, load_global_config, resolve_config
from agtx.constants import DEFAULT_IMPLEMENT_TEXT


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_files(tmp_path):
    config = resolve_config(tmp_path / "project", global_path=tmp_path / "missing.yml")

    assert config.default_agent == "claude"
    assert "claude" in config.agents
    assert config.prompts.implement_text == DEFAULT_IMPLEMENT_TEXT
    assert config.tmux.binary == "tmux"
    assert config.git.branch_prefix == "task/"
    assert config.git.force_remove is False
    assert config.timeouts.provider_seconds is None


def test_project_overrides_global(tmp_path):
    global_file = _write(
        tmp_path / "global.yml",
        "tmux:\n  binary: /opt/bin/tmux\ngit:\n  branch_prefix: agtx/\n  force_remove: true\n",
    )
    project_root = tmp_path / "project"
    _write(project_root / ".agtx" / "config.yml", "git:\n  branch_prefix: feature/\n")

    config = resolve_config(project_root, global_path=global_file)

    assert config.tmux.binary == "/opt/bin/tmux"
    assert config.git.branch_prefix == "feature/"
    # Nested keys not set by the project survive the merge
    assert config.git.force_remove is True


def test_env_vars_are_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("AGTX_TEST_TMUX", "/custom/tmux")
    global_file = _write(tmp_path / "global.yml", "tmux:\n  binary: ${AGTX_TEST_TMUX}\n")

    config = load_global_config(global_file)

    assert config.tmux.binary == "/custom/tmux"


def test_config_path_env_override(tmp_path, monkeypatch):
    global_file = _write(tmp_path / "elsewhere.yml", "default_agent: codex\n")
    monkeypatch.setenv("AGTX_CONFIG_PATH", str(global_file))

    config = load_global_config()

    assert config.default_agent == "codex"


def test_unreadable_yaml_falls_back_to_defaults(tmp_path):
    global_file = _write(tmp_path / "global.yml", "tmux: [unclosed\n")

    config = load_global_config(global_file)

    assert config == AgtxConfig()


def test_default_agent_must_be_defined():
    with pytest.raises(ValidationError):
        AgtxConfig.model_validate({"default_agent": "nobody"})


def test_empty_agent_command_rejected():
    with pytest.raises(ValidationError):
        AgtxConfig.model_validate({"agents": {"claude": {"command": "   "}}})


def test_provider_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        AgtxConfig.model_validate({"timeouts": {"provider_seconds": 0}})
