# parser.py
# Turns raw model text into a tool call or a final answer.
#
# No fallback heuristics: text that is neither is a hard failure for the step.

import re

from minutes_agent.models import AgentAction, AgentFinish, ParseResult

FINAL_ANSWER_MARKER = "Task Summary:"

ACTION_PATTERN = re.compile(r"Action: (.*)\nAction Input: (.*)", re.DOTALL)


class OutputParserError(ValueError):
    """Raised when model output matches neither the final-answer nor tool-call form."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Could not parse LLM output: {text}")
        self.text = text


class BaseOutputParser:
    """Capability interface for agent output parsers. Only parse is supported."""

    def parse(self, text: str) -> ParseResult:
        raise NotImplementedError

    def get_format_instructions(self) -> str:
        raise NotImplementedError("Not implemented")


class TaskOutputParser(BaseOutputParser):
    def parse(self, text: str) -> ParseResult:
        """
        Classify `text` as AgentFinish or AgentAction.

        A summary marker anywhere wins, and the text after its last
        occurrence is the summary. Otherwise an `Action:` line followed by
        an `Action Input:` line is required; both captures may span lines.
        Raises OutputParserError carrying `text` verbatim.
        """
        if FINAL_ANSWER_MARKER in text:
            summary = text.split(FINAL_ANSWER_MARKER)[-1].strip()
            return AgentFinish(return_values={"output": summary}, log=text)

        match = ACTION_PATTERN.search(text)
        if not match:
            raise OutputParserError(text)

        return AgentAction(
            tool=match.group(1).strip(),
            tool_input=match.group(2).strip().strip('"'),
            log=text,
        )
