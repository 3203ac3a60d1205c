"""CLI entry point for the symptom relay."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from symptomrelay import __version__
from symptomrelay.config import get_settings
from symptomrelay.errors import RelayError
from symptomrelay.logger import get_logger
from symptomrelay.models.analysis import SEVERITIES, AnalysisRequest, AnalysisResult
from symptomrelay.services.completion import LazyCompletionClient, build_completion_client
from symptomrelay.services.relay import SymptomAnalysisRelay
from symptomrelay.services.store import AnalysisStore

console = Console()
logger = get_logger(__name__)

RISK_COLORS = {"low": "green", "medium": "yellow", "high": "red"}


@click.group()
@click.version_option(version=__version__, prog_name="symptomrelay")
def cli():
    """Symptom Relay: symptom triage through a hosted language model.

    Not a diagnosis. Always consult a healthcare professional.
    """
    pass


@cli.command()
@click.option(
    "--symptoms",
    "-s",
    type=str,
    default=None,
    help="Describe the symptoms (or enter interactively)",
)
@click.option(
    "--severity",
    type=click.Choice(SEVERITIES, case_sensitive=False),
    default="medium",
    show_default=True,
    help="How severe the symptoms feel",
)
@click.option("--user-id", "-u", type=str, required=True, help="User the analysis belongs to")
def analyze(symptoms: str | None, severity: str, user_id: str):
    """Analyze symptoms and store the result."""
    logger.info("CLI analysis started")
    settings = get_settings()

    if symptoms is None:
        console.print(
            Panel(
                "Describe what you are feeling, how long it has lasted,\n"
                "and anything that makes it better or worse.",
                title="Symptom Relay",
                border_style="blue",
            )
        )
        symptoms = click.prompt("\nYour symptoms")

    completion = LazyCompletionClient(lambda: build_completion_client(settings))
    try:
        store = AnalysisStore(settings.database_path)
        relay = SymptomAnalysisRelay(store, completion, settings)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Analyzing symptoms...", total=None)
            result = relay.analyze(
                AnalysisRequest(symptoms=symptoms, severity=severity, caller_id=user_id)
            )
            progress.update(task, completed=True)

        _display_analysis(result)
        logger.info(f"CLI analysis {result.id} completed")

    except RelayError as e:
        logger.error(f"Analysis failed: {type(e).__name__}: {e.message}")
        console.print(f"[red]Error:[/red] {e.message}")
        raise SystemExit(1)
    finally:
        completion.close()


@cli.command()
@click.option("--user-id", "-u", type=str, required=True, help="User whose history to show")
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Rows to show")
def history(user_id: str, limit: int):
    """List stored analyses for a user, newest first."""
    settings = get_settings()

    try:
        results = AnalysisStore(settings.database_path).list_for_user(user_id, limit=limit)
    except RelayError as e:
        logger.error(f"History lookup failed: {e.message}")
        console.print(f"[red]Error:[/red] {e.message}")
        raise SystemExit(1)

    if not results:
        console.print("[yellow]No analyses found.[/yellow]")
        return

    table = Table(title=f"Symptom Analyses for {user_id}", show_header=True)
    table.add_column("Date", style="dim")
    table.add_column("Symptoms", style="bold", max_width=50)
    table.add_column("Severity")
    table.add_column("Risk", justify="center")
    table.add_column("ID", style="dim")

    for result in results:
        color = RISK_COLORS[result.risk_level]
        table.add_row(
            result.created_at.strftime("%Y-%m-%d %H:%M"),
            result.symptoms[:50] + "..." if len(result.symptoms) > 50 else result.symptoms,
            result.severity,
            f"[{color}]{result.risk_level.upper()}[/{color}]",
            result.id[:8],
        )

    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", "-p", type=int, default=8000, show_default=True, help="Port to bind")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    logger.info(f"Serving API on {host}:{port}")
    uvicorn.run("symptomrelay.api.main:app", host=host, port=port, reload=reload)


def _display_analysis(result: AnalysisResult):
    """Display one analysis."""
    structured = result.structured_result
    color = RISK_COLORS[result.risk_level]

    console.print()
    console.print(
        Panel(
            f"[bold]{structured.summary}[/bold]\n\n"
            f"Risk Level: [{color}]{result.risk_level.upper()}[/{color}]\n"
            f"When to see a doctor: {structured.when_to_visit}",
            title="Symptom Analysis",
            border_style="cyan",
        )
    )

    sections = [
        ("Possible Conditions", structured.conditions),
        ("Recommended Actions", structured.actions),
        ("Precautions", structured.precautions),
        ("Prevention", structured.prevention),
        ("Medicines", structured.medicines or []),
    ]
    for title, entries in sections:
        if not entries:
            continue
        table = Table(title=title, show_header=False)
        table.add_column("#", style="dim")
        table.add_column(title)
        for i, entry in enumerate(entries, 1):
            table.add_row(str(i), entry)
        console.print(table)

    console.print()
    console.print(
        f"[dim]Analysis {result.id}. This is not a diagnosis. "
        "Always consult a healthcare professional.[/dim]"
    )


if __name__ == "__main__":
    cli()
