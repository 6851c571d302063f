from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .app_context import AppContext
from .config.models import ConfigError
from .events.store import EventStore
from .tools.builtin import build_default_registry
from .tools.registry import DuplicateToolError

app = typer.Typer(add_completion=False, help="toolloop: a terminal agent that lets a model call local tools.")
console = Console()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser().resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def _load_context(cwd: Path | None, config: Path | None, session: str | None) -> AppContext:
    try:
        return AppContext.from_env(_resolve_cwd(cwd), config_path=config, session_id=session, console=console)
    except (ConfigError, DuplicateToolError) as e:
        console.print(f"[bold red]Error[/bold red]: {escape(str(e))}")
        raise typer.Exit(code=1)


def _print_header(ctx: AppContext) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_row("[bold green]cwd[/bold green]", f"[bright_cyan]{ctx.cwd}[/bright_cyan]")
    table.add_row("[bold green]session[/bold green]", f"[bright_cyan]{ctx.events.session_id}[/bright_cyan]")
    table.add_row("[bold green]provider[/bold green]", f"[bright_cyan]{ctx.settings.provider}[/bright_cyan]")
    table.add_row("[bold green]model[/bold green]", f"[bright_cyan]{ctx.settings.model}[/bright_cyan]")
    table.add_row("[bold green]config[/bold green]", f"[bright_cyan]{ctx.settings.loaded_from or '(defaults)'}[/bright_cyan]")
    table.add_row("[bold green]tools[/bold green]", f"[bright_cyan]{', '.join(ctx.tools.names())}[/bright_cyan]")
    console.print(Panel(table, title="[bold magenta]toolloop[/bold magenta]", border_style="bright_blue"))


@app.command()
def repl(
    config: Path = typer.Option(None, "--config", help="YAML config path (default: ./toolloop.yaml if present)."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory for tools. Defaults to current directory."),
    session: str = typer.Option(None, "--session", help="Session id used to name the event log."),
    max_tool_rounds: int = typer.Option(None, "--max-tool-rounds", help="Max tool rounds per message."),
    trace: bool = typer.Option(False, "--trace", help="Show tool results in panels."),
):
    """Chat interactively; reads lines from stdin until end of input."""
    ctx = _load_context(cwd, config, session)
    if max_tool_rounds is not None:
        ctx.settings.max_tool_rounds = max_tool_rounds
    if trace:
        ctx.settings.trace = True
    _print_header(ctx)
    console.print("Chat with the model (use 'ctrl-d' or 'exit' to quit)")
    ctx.build_agent().run()


@app.command()
def run(
    prompt: str = typer.Option(..., "--prompt", "-p", help="User prompt to run once."),
    config: Path = typer.Option(None, "--config", help="YAML config path (default: ./toolloop.yaml if present)."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory for tools. Defaults to current directory."),
    session: str = typer.Option(None, "--session", help="Session id used to name the event log."),
    max_tool_rounds: int = typer.Option(None, "--max-tool-rounds", help="Max tool rounds for this prompt."),
):
    """Send a single prompt, let the model use tools, and exit."""
    ctx = _load_context(cwd, config, session)
    if max_tool_rounds is not None:
        ctx.settings.max_tool_rounds = max_tool_rounds
    ctx.build_agent(read_input=lambda: None).send(prompt)


@app.command()
def tools():
    """List the built-in tools and the JSON schema sent to the model."""
    for t in build_default_registry():
        console.print(
            Panel(
                escape(t.spec.description + "\n\n" + json.dumps(t.spec.parameters, indent=2)),
                title=f"[bold]{t.spec.name}[/bold]",
            )
        )


@app.command()
def events(
    session: str = typer.Option(..., "--session", help="Session id to inspect events."),
    tail: int = typer.Option(200, "--tail", help="Show last N events."),
):
    """Show recent structured events (LLM calls, tool calls) recorded for a session."""
    es = EventStore.open(session)
    evs = list(es.iter_events())
    evs = evs[-tail:] if tail and tail > 0 else evs
    console.print(Panel.fit(f"session: {session}\nfile: {es.path}\nevents: {len(evs)}", title="Events"))
    for e in evs:
        ts = datetime.fromtimestamp(e.ts).strftime("%Y-%m-%d %H:%M:%S")
        console.print(Panel.fit(escape(json.dumps(e.data, ensure_ascii=False, indent=2)[:4000]), title=f"{ts}  {e.type}"))


if __name__ == "__main__":
    app()
