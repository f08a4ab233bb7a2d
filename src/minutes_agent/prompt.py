# prompt.py
# Prompt assembly for the task agent.
#
# The template is fixed: a preamble, one "name: description" line per tool,
# the Thought/Action/Observation usage block, and the task suffix. Prior
# steps are serialized into the scratchpad and substituted into the suffix.

from string import Formatter
from typing import Any, Sequence

from minutes_agent.models import AgentStep, Tool


class MissingVariableError(KeyError):
    """Raised when the template references a placeholder with no value."""


class UnsupportedPlaceholderError(ValueError):
    """Raised when a placeholder carries a format spec or conversion."""


# ---------------------------------------------------------------------------
# Template text
# ---------------------------------------------------------------------------

PREFIX = "Complete the following task. You have access to the following tools:"

FORMAT_INSTRUCTIONS = """\
Use the following format:

Task: the task to complete
Thought: you should always think about what to do
Action: the action to take, should be one of [{tool_names}]
Action Input: the input to the action
Observation: the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
Thought: The task is now complete.
Task Summary: a short summary of how the task was completed

Note that every Thought should be followed by an Action and Action Input.\
"""

SUFFIX = """\
Begin!

Task: {input}
Thought:{agent_scratchpad}\
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_instructions(tool_names: str) -> str:
    # Plain replace: tool names are literal text, not template fields.
    return FORMAT_INSTRUCTIONS.replace("{tool_names}", tool_names)


def format_scratchpad(steps: Sequence[AgentStep]) -> str:
    """Serialize prior steps as `log`, `Observation: ...`, `Thought:`."""
    return "".join(
        f"{step.action.log}\nObservation: {step.observation}\nThought:" for step in steps
    )


def render_template(template: str, values: dict[str, Any]) -> str:
    """
    Substitute `{name}` placeholders from `values`.

    Only bare names are supported; `{{` and `}}` render as literal braces.
    Raises UnsupportedPlaceholderError for a format spec or conversion
    (`{input:>10}`, `{input!r}`) and MissingVariableError for a
    placeholder absent from `values`.
    """
    parts: list[str] = []
    for literal, field, spec, conversion in Formatter().parse(template):
        parts.append(literal)
        if field is None:
            continue
        if spec or conversion:
            raise UnsupportedPlaceholderError(
                f"Placeholder {{{field}}} uses a format spec or conversion, which is not supported"
            )
        if field not in values:
            raise MissingVariableError(field)
        parts.append(str(values[field]))
    return "".join(parts)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class BasePromptTemplate:
    """
    Capability interface for chat prompt templates.

    Only format_messages is part of the supported contract. The remaining
    operations exist so callers can discover them, and fail immediately.
    """

    input_variables: list[str]

    async def format_messages(self, values: dict[str, Any]) -> list[dict]:
        raise NotImplementedError

    @property
    def prompt_type(self) -> str:
        raise NotImplementedError("Not implemented")

    def partial(self, values: dict[str, Any]) -> "BasePromptTemplate":
        raise NotImplementedError("Not implemented")

    def serialize(self) -> dict[str, Any]:
        raise NotImplementedError("Not implemented")


class TaskPromptTemplate(BasePromptTemplate):
    """Renders the task prompt for a fixed tool list."""

    def __init__(self, tools: Sequence[Tool], input_variables: Sequence[str] | None = None) -> None:
        self.tools = list(tools)
        self.input_variables = list(input_variables or ["input", "agent_scratchpad"])

    def template(self) -> str:
        tool_strings = "\n".join(f"{tool.name}: {tool.description}" for tool in self.tools)
        tool_names = "\n".join(tool.name for tool in self.tools)
        return "\n\n".join([PREFIX, tool_strings, format_instructions(tool_names), SUFFIX])

    def format(self, values: dict[str, Any]) -> str:
        steps = values.get("intermediate_steps", [])
        # Caller-supplied values win over the derived scratchpad.
        merged = {"agent_scratchpad": format_scratchpad(steps), **values}
        return render_template(self.template(), merged)

    async def format_messages(self, values: dict[str, Any]) -> list[dict]:
        return [{"role": "user", "content": self.format(values)}]
