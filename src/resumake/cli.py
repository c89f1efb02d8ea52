"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel

from resumake.clients.lifecycle import ClientLifecycle
from resumake.clients.llm_client import LLMClient, check_api_key
from resumake.config import AppConfig, load_config
from resumake.logging.usage_store import UsageStore
from resumake.models.session import Session, Stage
from resumake.parsers.source_reader import read_source_file
from resumake.pipeline.generator import ResumeGenerator
from resumake.wizard.runner import WizardRunner

app = typer.Typer(
    name="resumake",
    help="Interactive wizard that turns your notes into a Markdown resume with Claude.",
    add_completion=False,
)
console = Console()

LOG_FILE = "resumake.log"


def _setup_logging(verbose: bool) -> None:
    # The terminal belongs to the wizard; detailed logs go to a file
    if verbose:
        logging.basicConfig(
            filename=LOG_FILE,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logging.getLogger("httpx").setLevel(logging.INFO)
        logging.getLogger("anthropic").setLevel(logging.INFO)


def _load_config_or_exit(config_path: Path | None) -> AppConfig:
    try:
        return load_config(config_path)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


def _open_usage_store(config: AppConfig) -> UsageStore | None:
    if not config.usage.enabled:
        return None
    try:
        return UsageStore(config.usage.resolved_db_path)
    except Exception:
        logging.getLogger(__name__).warning("Usage log disabled", exc_info=True)
        return None


def build_runner(
    config: AppConfig,
    *,
    source: str = "",
    output: str = "",
    usage_store: UsageStore | None = None,
) -> WizardRunner:
    """Wire the session, client lifecycle, generator and runner together."""
    session = Session.create(
        api_key_valid=check_api_key(),
        source_path=source,
        output_path=output,
        default_output_path=config.output.default_path,
    )
    lifecycle = ClientLifecycle(
        factory=lambda api_key: LLMClient(api_key=api_key, timeout=config.llm.timeout),
    )
    generator = ResumeGenerator(
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
        default_output_path=config.output.default_path,
        usage_store=usage_store,
        session_id=uuid.uuid4().hex[:12],
    )

    def read_file(path: str) -> str:
        return read_source_file(
            path,
            max_size=config.input.max_file_size,
            supported_extensions=config.input.supported_extensions,
        )

    return WizardRunner(
        session,
        lifecycle,
        generator,
        console=console,
        input_stream=sys.stdin,
        read_file=read_file,
        stale_file_errors=config.wizard.stale_file_errors,
        tick_interval=config.wizard.tick_interval,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    source: Path = typer.Option(None, "--source", "-s", help="Existing resume to merge (.txt/.md)"),
    output: Path = typer.Option(None, "--output", "-o", help="Output file (default: resume_out.md)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=f"Write debug logs to {LOG_FILE}"),
) -> None:
    """Start the interactive resume wizard."""
    if ctx.invoked_subcommand is not None:
        return

    _setup_logging(verbose)
    config = _load_config_or_exit(config_path)
    usage_store = _open_usage_store(config)

    console.print("[bold]Resumake[/bold]: a CLI tool for generating resumes")
    runner = build_runner(
        config,
        source=str(source) if source else "",
        output=str(output) if output else "",
        usage_store=usage_store,
    )
    session = asyncio.run(runner.run())

    if session.stage is Stage.SUCCESS:
        console.print(f"\n[green]Resume saved: {session.output_path}[/green]")
    console.print("\nResumake finished.")


@app.command()
def history(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of runs to show"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Show recent generation runs from the usage log."""
    config = _load_config_or_exit(config_path)
    if not config.usage.enabled:
        console.print("[yellow]Usage logging is disabled in the configuration.[/yellow]")
        return

    store = UsageStore(config.usage.resolved_db_path)
    logs = store.get_logs(limit=limit)
    if not logs:
        console.print("[yellow]No runs recorded yet.[/yellow]")
        return

    for log in logs:
        status = "[green]ok[/green]" if log.success else "[red]failed[/red]"
        truncated = " [yellow](truncated)[/yellow]" if log.truncated else ""
        console.print(
            f"  {log.timestamp:%Y-%m-%d %H:%M} {status}{truncated} "
            f"{log.output_path or '-'} [dim]{log.total_input_tokens}/{log.total_output_tokens} tokens, "
            f"{log.elapsed_seconds:.1f}s[/dim]"
        )
        if log.error_message:
            console.print(f"      [dim]{log.error_message}[/dim]")

    stats = store.get_stats()
    console.print(
        Panel(
            f"Runs: {stats['total_runs']} | Success: {stats['success_rate']:.0f}% | "
            f"Truncated: {stats['truncated_runs']}\n"
            f"Tokens: {stats['total_input_tokens']} in / {stats['total_output_tokens']} out",
            title="Usage",
        )
    )


if __name__ == "__main__":
    app()
