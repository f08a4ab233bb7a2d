import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from minutes_agent.executor import (
    MAX_ITERATIONS_OUTPUT,
    AgentExecutor,
    DuplicateToolError,
    SingleActionAgent,
    ToolNotFoundError,
)
from minutes_agent.models import AgentAction, AgentFinish, Tool
from minutes_agent.parser import OutputParserError, TaskOutputParser
from minutes_agent.prompt import TaskPromptTemplate

STOP = ["\nObservation"]

QA_CALL = " I need the follow-up items.\nAction: meeting-qa\nAction Input: What are the follow-up items?"
EMAIL_CALL = ' Bob owns the budget.\nAction: email-sender\nAction Input: {"to": "bob@wigit.com"}'
FINISH = " The task is now complete.\nTask Summary: Emailed Bob."


def _llm(*responses):
    llm = MagicMock()
    llm.predict = AsyncMock(side_effect=list(responses))
    return llm


def _executor(llm, tools, **kwargs):
    agent = SingleActionAgent(
        llm=llm,
        prompt=TaskPromptTemplate(tools),
        output_parser=TaskOutputParser(),
        stop=STOP,
    )
    return AgentExecutor(agent, tools, **kwargs)


def _tools(qa_func=None, email_func=None):
    return [
        Tool(name="meeting-qa", description="answers questions", func=qa_func or MagicMock(return_value="Bob owns the budget.")),
        Tool(name="email-sender", description="sends email", func=email_func or MagicMock(return_value="202 Accepted")),
    ]


# ---------------------------------------------------------------------------
# Agent planning
# ---------------------------------------------------------------------------

async def test_plan_passes_stop_sequences():
    llm = _llm(FINISH)
    agent = SingleActionAgent(llm, TaskPromptTemplate(_tools()), TaskOutputParser(), stop=STOP)

    result = await agent.plan([], {"input": "Email Bob."})

    assert isinstance(result, AgentFinish)
    messages = llm.predict.call_args.args[0]
    assert messages[0]["content"].endswith("Task: Email Bob.\nThought:")
    assert llm.predict.call_args.kwargs["stop"] == STOP


async def test_plan_truncates_at_stop_sequence():
    # The model ran on and hallucinated its own observation and summary.
    llm = _llm(QA_CALL + "\nObservation: nobody\nThought: done\nTask Summary: nothing to do")
    agent = SingleActionAgent(llm, TaskPromptTemplate(_tools()), TaskOutputParser(), stop=STOP)

    result = await agent.plan([], {"input": "t"})

    assert isinstance(result, AgentAction)
    assert result.tool == "meeting-qa"
    assert result.tool_input == "What are the follow-up items?"
    assert result.log == QA_CALL


# ---------------------------------------------------------------------------
# Control loop
# ---------------------------------------------------------------------------

async def test_immediate_finish():
    executor = _executor(_llm(FINISH), _tools())
    assert await executor.call({"input": "t"}) == {"output": "Emailed Bob."}


async def test_tool_calls_then_finish():
    qa = MagicMock(return_value="Bob owns the budget.")
    email = MagicMock(return_value="202 Accepted")
    llm = _llm(QA_CALL, EMAIL_CALL, FINISH)
    executor = _executor(llm, _tools(qa, email))

    result = await executor.call({"input": "Email follow-ups."})

    assert result == {"output": "Emailed Bob."}
    qa.assert_called_once_with("What are the follow-up items?")
    email.assert_called_once_with('{"to": "bob@wigit.com"}')

    # Each model call sees the full scratchpad so far.
    second_prompt = llm.predict.call_args_list[1].args[0][0]["content"]
    assert second_prompt.endswith(QA_CALL + "\nObservation: Bob owns the budget.\nThought:")
    third_prompt = llm.predict.call_args_list[2].args[0][0]["content"]
    assert third_prompt.endswith(
        QA_CALL + "\nObservation: Bob owns the budget.\nThought:"
        + EMAIL_CALL + "\nObservation: 202 Accepted\nThought:"
    )


async def test_async_tool_supported():
    email = AsyncMock(return_value="sent")
    executor = _executor(_llm(EMAIL_CALL, FINISH), _tools(email_func=email), return_intermediate_steps=True)

    result = await executor.call({"input": "t"})

    email.assert_awaited_once_with('{"to": "bob@wigit.com"}')
    assert result["intermediate_steps"][0].observation == "sent"


async def test_return_intermediate_steps_in_order():
    executor = _executor(_llm(QA_CALL, EMAIL_CALL, FINISH), _tools(), return_intermediate_steps=True)

    result = await executor.call({"input": "t"})

    steps = result["intermediate_steps"]
    assert [s.action.tool for s in steps] == ["meeting-qa", "email-sender"]
    assert [s.observation for s in steps] == ["Bob owns the budget.", "202 Accepted"]


async def test_scratchpad_reset_between_calls():
    llm = _llm(QA_CALL, FINISH, FINISH)
    executor = _executor(llm, _tools())

    await executor.call({"input": "first"})
    await executor.call({"input": "second"})

    last_prompt = llm.predict.call_args_list[2].args[0][0]["content"]
    assert last_prompt.endswith("Task: second\nThought:")


async def test_max_iterations_forces_stop():
    qa = MagicMock(return_value="still looking")
    llm = _llm(*[QA_CALL] * 3)
    executor = _executor(llm, _tools(qa_func=qa), max_iterations=3)

    result = await executor.call({"input": "t"})

    assert result == {"output": MAX_ITERATIONS_OUTPUT}
    assert qa.call_count == 3
    assert llm.predict.await_count == 3


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

async def test_unknown_tool_raises():
    executor = _executor(_llm(" hmm\nAction: calendar\nAction Input: book it"), _tools())

    with pytest.raises(ToolNotFoundError) as exc_info:
        await executor.call({"input": "t"})
    assert exc_info.value.tool_name == "calendar"


async def test_tool_lookup_is_case_sensitive():
    executor = _executor(_llm(" hmm\nAction: Email-Sender\nAction Input: x"), _tools())

    with pytest.raises(ToolNotFoundError):
        await executor.call({"input": "t"})


@patch("minutes_agent.executor.display")
async def test_unknown_tool_reported_when_verbose(mock_display):
    executor = _executor(_llm(" hmm\nAction: calendar\nAction Input: x"), _tools(), verbose=True)

    with pytest.raises(ToolNotFoundError):
        await executor.call({"input": "t"})
    mock_display.tool_not_found.assert_called_once_with("calendar")


async def test_parse_error_aborts_run():
    email = MagicMock()
    executor = _executor(_llm("I refuse to follow the format."), _tools(email_func=email))

    with pytest.raises(OutputParserError) as exc_info:
        await executor.call({"input": "t"})
    assert exc_info.value.text == "I refuse to follow the format."
    email.assert_not_called()


async def test_tool_error_propagates_unchanged():
    boom = RuntimeError("SES throttled")
    email = MagicMock(side_effect=boom)
    executor = _executor(_llm(EMAIL_CALL, FINISH), _tools(email_func=email))

    with pytest.raises(RuntimeError) as exc_info:
        await executor.call({"input": "t"})
    assert exc_info.value is boom


def test_duplicate_tool_names_rejected():
    tools = _tools() + [Tool(name="meeting-qa", description="again", func=lambda q: q)]
    with pytest.raises(DuplicateToolError):
        _executor(_llm(), tools)
