"""Shared naming conventions for agtx resources."""

# Worktrees live under <project_root>/.agtx/worktrees/<slug>
AGTX_DIR = ".agtx"
WORKTREES_DIR = "worktrees"
PROJECT_CONFIG_FILE = "config.yml"

# Windows are named task-<slug> and addressed as <session>:task-<slug>
WINDOW_PREFIX = "task-"

DEFAULT_BRANCH_PREFIX = "task/"
DEFAULT_AGENT = "claude"
DEFAULT_IMPLEMENT_TEXT = "Please implement the plan"
DEFAULT_PLAN_TEMPLATE = (
    "Plan the following task. Do not write code yet; produce a step-by-step plan.\n\n"
    "Task: {title}\n\n{description}"
)

# Slug is the first SLUG_ID_LENGTH characters of the task id plus the slugified title
SLUG_ID_LENGTH = 8
SLUG_TITLE_MAX_LENGTH = 40
