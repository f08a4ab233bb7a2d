# display.py
# All terminal output for the meeting-minutes task agent.
#
# This module owns presentation entirely. executor.py and run.py never
# touch rich directly; they call named functions here.
#
# Colour language:
#   cyan: scaffolding / setup events
#   blue: model calls and responses
#   green: success / final answer
#   red: failures, halts
#   yellow: forced stops
#   magenta: agent internals (Action / Action Input / Observation)

from langchain_core.documents import Document
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from minutes_agent.models import AgentStep, Tool

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return escape(value[:max_len]) + "…"
    return escape(value)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def banner(model_name: str, document_path: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Meeting Minutes Task Agent[/bold cyan]\n"
            "[dim]Single-action agent over a retrieval QA tool and an email function[/dim]\n\n"
            f"[dim]Model    :[/dim] [white]{escape(model_name)}[/white]\n"
            f"[dim]Document :[/dim] [white]{escape(document_path)}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def document_split(source: str, chunks: list[Document]) -> None:
    console.print()
    console.print(
        _label("SETUP", "cyan"),
        f"[cyan] Loaded[/cyan] [white]{escape(source)}[/white]"
        f"[cyan] → {len(chunks)} chunk(s)[/cyan]",
    )
    for chunk in chunks:
        console.print(f"  [dim]{_mono(chunk.page_content.replace(chr(10), ' '), 100)}[/dim]")


def tools_registered(tools: list[Tool]) -> None:
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan", padding=(0, 1))
    table.add_column("Tool", style="bold white")
    table.add_column("Description", style="dim white")
    for tool in tools:
        table.add_row(escape(tool.name), escape(tool.description))
    console.print(table)


def task_received(task: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW TASK[/cyan]", style="cyan"))
    console.print(
        Panel(
            f"[white]{escape(task)}[/white]",
            title=_label("TASK", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Agent loop
# ---------------------------------------------------------------------------


def iteration_start(iteration: int) -> None:
    console.print()
    console.print(_label("AGENT", "blue"), f"[blue] → Calling model (iteration {iteration})…[/blue]")


def model_response(text: str) -> None:
    console.print(f"  [blue]Model[/blue]    [dim white]{_mono(text.strip(), 200)}[/dim white]")


def react_action(tool: str, tool_input: str) -> None:
    console.print(
        f"  [magenta]Action[/magenta]   [bold white]{escape(tool)}[/bold white]"
        f"  [dim]{_mono(tool_input, 100)}[/dim]"
    )


def react_observation(observation: str) -> None:
    console.print(f"  [magenta]Observe[/magenta]  [white]{_mono(observation, 140)}[/white]")


def tool_not_found(tool_name: str) -> None:
    console.print(
        Panel(
            f"[bold red]Tool [white]{escape(repr(tool_name))}[/white] is not registered.[/bold red]\n"
            "[dim]The model requested an action outside the tool list. Halting.[/dim]",
            title=_label("TOOL NOT FOUND ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def max_iterations_reached(limit: int) -> None:
    console.print()
    console.print(
        _label("AGENT", "yellow"),
        f"[yellow] Stopped after {limit} iteration(s) without a Task Summary.[/yellow]",
    )


def execution_summary(steps: list[AgentStep]) -> None:
    if not steps:
        return
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("Step", justify="center", width=6)
    table.add_column("Tool", width=32)
    table.add_column("Observation", style="dim white")

    for index, step in enumerate(steps, start=1):
        table.add_row(str(index), escape(step.action.tool), _mono(step.observation, 60))

    console.print(
        Panel(
            table,
            title="[dim]EXECUTION SUMMARY[/dim]",
            border_style="dim",
            padding=(0, 1),
        )
    )


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def final_result(result: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]{escape(result)}[/white]",
            title=_label("TASK SUMMARY", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
