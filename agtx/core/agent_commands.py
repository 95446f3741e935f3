"""Text injected into task windows on planning and implementation edges."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field

from agtx.config.schema import AgtxConfig
from agtx.constants import DEFAULT_IMPLEMENT_TEXT, DEFAULT_PLAN_TEMPLATE
from agtx.core.models import Task

_PLACEHOLDER = re.compile(r"\{(title|description|slug)\}")


def render_prompt(template: str, task: Task) -> str:
    """Fill `{title}`, `{description}` and `{slug}`; any other braces stay literal."""
    values = {"title": task.title, "description": task.description, "slug": task.slug}
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)


@dataclass(frozen=True)
class AgentCommandBuilder:
    """Builds the agent launch line and follow-up prompts for a task.

    `agent_commands` maps agent names to their base command line. Tasks whose
    agent is unknown fall back to `default_agent`.
    """

    agent_commands: dict[str, str] = field(default_factory=lambda: {"claude": "claude --dangerously-skip-permissions"})
    default_agent: str = "claude"
    plan_template: str = DEFAULT_PLAN_TEMPLATE
    implement_text: str = DEFAULT_IMPLEMENT_TEXT

    @classmethod
    def from_config(cls, config: AgtxConfig) -> "AgentCommandBuilder":
        return cls(
            agent_commands={name: entry.command for name, entry in config.agents.items()},
            default_agent=config.default_agent,
            plan_template=config.prompts.plan_template,
            implement_text=config.prompts.implement_text,
        )

    def agent_command(self, agent: str) -> str:
        command = self.agent_commands.get(agent)
        if command is None:
            command = self.agent_commands[self.default_agent]
        return command

    def plan_prompt(self, task: Task) -> str:
        return render_prompt(self.plan_template, task).strip()

    def plan_command(self, task: Task) -> str:
        """Launch the task's agent with the planning prompt as its first message."""
        return f"{self.agent_command(task.agent)} {shlex.quote(self.plan_prompt(task))}"

    def implement_command(self, task: Task) -> str:
        # Sent to the already running agent, not to a shell
        return render_prompt(self.implement_text, task)
