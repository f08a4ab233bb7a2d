# executor.py
# Single-action agent and its control loop.
#
# The executor is the kernel: it owns the scratchpad, tool lookup and the
# stop condition. The model only ever sees the assembled prompt; the tools
# only ever see their parsed input.
#
# Control flow per iteration:
#   prompt(tools, scratchpad) → model (stop sequences) → parser
#   → AgentFinish: return | AgentAction: lookup → invoke → append step
#
# All terminal output is delegated to display.py.

import inspect
from typing import Any, Sequence

from minutes_agent import display
from minutes_agent.llm import ChatModel, truncate_at_stop
from minutes_agent.models import AgentAction, AgentFinish, AgentStep, ParseResult, Tool
from minutes_agent.parser import BaseOutputParser
from minutes_agent.prompt import BasePromptTemplate

MAX_ITERATIONS_OUTPUT = "Agent stopped due to max iterations."


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ToolNotFoundError(LookupError):
    """Raised when the model requests a tool absent from the registry."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool '{tool_name}' is not in the registry. Halting.")
        self.tool_name = tool_name


class DuplicateToolError(ValueError):
    """Raised when two tools share a name."""


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


class SingleActionAgent:
    """
    Decides the next move from the scratchpad: one model call, one parse.

    Example:
        agent = SingleActionAgent(
            llm=ChatModel("gpt-4"),
            prompt=TaskPromptTemplate(tools),
            output_parser=TaskOutputParser(),
            stop=["\\nObservation"],
        )
    """

    def __init__(
        self,
        llm: ChatModel,
        prompt: BasePromptTemplate,
        output_parser: BaseOutputParser,
        stop: Sequence[str] | None = None,
    ) -> None:
        self.llm = llm
        self.prompt = prompt
        self.output_parser = output_parser
        self.stop = list(stop or [])

    async def plan(self, steps: list[AgentStep], inputs: dict[str, Any]) -> ParseResult:
        messages = await self.prompt.format_messages({"intermediate_steps": steps, **inputs})
        output = await self.llm.predict(messages, stop=self.stop)
        # Providers that ignore `stop` still get cut here, before parsing.
        return self.output_parser.parse(truncate_at_stop(output, self.stop))


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class AgentExecutor:
    """
    Runs the agent until it produces a final answer.

    Parse errors, unknown tools and tool failures all propagate; there is
    no retry. With max_iterations=None the loop is unbounded.
    """

    def __init__(
        self,
        agent: SingleActionAgent,
        tools: Sequence[Tool],
        max_iterations: int | None = 15,
        return_intermediate_steps: bool = False,
        verbose: bool = False,
    ) -> None:
        self.agent = agent
        self.tools = list(tools)
        self.max_iterations = max_iterations
        self.return_intermediate_steps = return_intermediate_steps
        self.verbose = verbose

        self._tools_by_name: dict[str, Tool] = {}
        for tool in self.tools:
            if tool.name in self._tools_by_name:
                raise DuplicateToolError(f"Duplicate tool name: {tool.name!r}")
            self._tools_by_name[tool.name] = tool

    def lookup_tool(self, name: str) -> Tool:
        """Case-sensitive exact match."""
        tool = self._tools_by_name.get(name)
        if tool is None:
            if self.verbose:
                display.tool_not_found(name)
            raise ToolNotFoundError(name)
        return tool

    async def invoke_tool(self, action: AgentAction) -> str:
        tool = self.lookup_tool(action.tool)
        result = tool.func(action.tool_input)
        if inspect.isawaitable(result):
            result = await result
        return str(result)

    def _should_continue(self, iterations: int) -> bool:
        return self.max_iterations is None or iterations < self.max_iterations

    def _result(self, output: dict[str, Any], steps: list[AgentStep]) -> dict[str, Any]:
        if self.return_intermediate_steps:
            return {**output, "intermediate_steps": steps}
        return dict(output)

    async def call(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """Execute one task. Returns the final return values (key `output`)."""
        steps: list[AgentStep] = []
        iterations = 0

        while self._should_continue(iterations):
            iterations += 1
            if self.verbose:
                display.iteration_start(iterations)

            decision = await self.agent.plan(steps, inputs)

            if self.verbose:
                display.model_response(decision.log)

            if isinstance(decision, AgentFinish):
                if self.verbose:
                    display.execution_summary(steps)
                return self._result(decision.return_values, steps)

            if self.verbose:
                display.react_action(decision.tool, decision.tool_input)

            observation = await self.invoke_tool(decision)

            if self.verbose:
                display.react_observation(observation)

            steps.append(AgentStep(action=decision, observation=observation))

        if self.verbose:
            display.max_iterations_reached(iterations)
            display.execution_summary(steps)
        return self._result({"output": MAX_ITERATIONS_OUTPUT}, steps)
