from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from agtx.constants import (
    DEFAULT_AGENT,
    DEFAULT_BRANCH_PREFIX,
    DEFAULT_IMPLEMENT_TEXT,
    DEFAULT_PLAN_TEMPLATE,
)


class AgentEntry(BaseModel):
    model_config = ConfigDict(extra="allow")
    command: str

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Agent command must not be empty")
        return v.strip()


def _default_agents() -> Dict[str, AgentEntry]:
    return {
        "claude": AgentEntry(command="claude --dangerously-skip-permissions"),
        "codex": AgentEntry(command="codex --full-auto"),
        "gemini": AgentEntry(command="gemini --yolo"),
    }


class PromptsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    plan_template: str = DEFAULT_PLAN_TEMPLATE
    implement_text: str = DEFAULT_IMPLEMENT_TEXT


class TmuxConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    binary: str = "tmux"


class GitConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    force_remove: bool = False


class TimeoutsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    # None keeps provider calls unbounded
    provider_seconds: Optional[float] = Field(default=None, gt=0)


class AgtxConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    default_agent: str = DEFAULT_AGENT
    agents: Dict[str, AgentEntry] = Field(default_factory=_default_agents)
    prompts: PromptsConfig = PromptsConfig()
    tmux: TmuxConfig = TmuxConfig()
    git: GitConfig = GitConfig()
    timeouts: TimeoutsConfig = TimeoutsConfig()

    @model_validator(mode="after")
    def validate_default_agent(self) -> "AgtxConfig":
        if self.default_agent not in self.agents:
            raise ValueError(f"default_agent '{self.default_agent}' is not defined under 'agents'")
        return self
