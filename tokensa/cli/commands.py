"""CLI commands for Tokensa."""

import asyncio
import sys
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from tokensa.config import get_settings
from tokensa.models.tags import Domain, SymptomTag

app = typer.Typer(
    name="tokensa",
    help="Local speech-therapy report generation server",
    add_completion=False,
)
console = Console()


def parse_tag(raw: str) -> SymptomTag:
    """Accept a tag by its full value or by its member name."""
    try:
        return SymptomTag(raw)
    except ValueError:
        pass
    try:
        return SymptomTag[raw.strip().upper()]
    except KeyError:
        raise typer.BadParameter(f"Unknown tag: {raw}. Run 'tokensa tags' for the list.")


def get_generator():
    """Get a report generator bound to the configured model."""
    from tokensa.llm import create_llm_from_settings
    from tokensa.report import ReportGenerator

    return ReportGenerator(create_llm_from_settings(), get_settings())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind (default: HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the local report server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"Starting Tokensa local server on {host}:{port} (model: {settings.ollama_model})")
    uvicorn.run(
        "tokensa.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )


async def _check_health(generator) -> tuple[bool, list[str]]:
    try:
        ok = await generator.ping()
        models: list[str] = []
        if ok and hasattr(generator.llm, "list_models"):
            models = await generator.llm.list_models()
        return ok, models
    finally:
        await generator.llm.aclose()


@app.command()
def health():
    """Check that the local model is reachable."""
    settings = get_settings()
    generator = get_generator()

    console.print("[bold]Tokensa Health Check[/bold]\n")

    ok, models = asyncio.run(_check_health(generator))

    table = Table(title="LLM Status")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Status")
    status_str = "[green]OK[/green]" if ok else "[red]UNAVAILABLE[/red]"
    table.add_row(generator.llm.provider, generator.model_name, status_str)
    console.print(table)

    if models:
        installed = generator.model_name in models
        colour = "green" if installed else "yellow"
        console.print(f"[{colour}]Installed models: {', '.join(models)}[/{colour}]")
        if not installed:
            console.print(f"Run: ollama pull {generator.model_name}")

    if not ok:
        console.print(f"[red]No answer from {settings.ollama_base_url}[/red]")
        raise typer.Exit(1)


async def _generate(generator, request) -> str:
    try:
        return await generator.generate_once(request)
    finally:
        await generator.llm.aclose()


async def _stream(generator, request) -> None:
    try:
        async for chunk in generator.stream_generate(request):
            sys.stdout.write(chunk)
            sys.stdout.flush()
        sys.stdout.write("\n")
    finally:
        await generator.llm.aclose()


@app.command()
def generate(
    age: float = typer.Option(..., "--age", "-a", help="Patient age in years"),
    tags: list[str] = typer.Option(..., "--tag", "-t", help="Symptom tag (repeatable)"),
    niveau: Optional[str] = typer.Option(None, "--niveau", "-n", help="School level, e.g. CE2"),
    prenom: Optional[str] = typer.Option(None, "--prenom", help="First name used in the report"),
    nom: Optional[str] = typer.Option(None, "--nom", help="Last name"),
    homme: Optional[bool] = typer.Option(None, "--homme/--femme", help="Patient gender"),
    stream: bool = typer.Option(False, "--stream", help="Print the report as it is produced"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    show_prompt: bool = typer.Option(False, "--show-prompt", help="Print the prompt first"),
):
    """Generate a report from the command line."""
    from tokensa.llm import LLMError
    from tokensa.models.intake import GenerationRequest
    from tokensa.models.output import GenerationResponse
    from tokensa.report.prompt import build_prompt

    try:
        request = GenerationRequest(
            age=age,
            niveau=niveau,
            prenom=prenom,
            nom=nom,
            homme=homme,
            tags=[parse_tag(t) for t in tags],
        )
    except ValidationError as e:
        for error in e.errors():
            loc = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]Invalid {loc}: {error['msg']}[/red]")
        raise typer.Exit(1)

    if show_prompt:
        console.print(Panel(build_prompt(request), title="Prompt", border_style="blue"))

    generator = get_generator()

    if stream:
        asyncio.run(_stream(generator, request))
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Generating with {generator.model_name}...", total=None)
        try:
            text = asyncio.run(_generate(generator, request))
        except LLMError as e:
            progress.stop()
            console.print(f"[red]Generation failed: {e}[/red]")
            raise typer.Exit(1)
        progress.update(task, completed=True)

    if output_json:
        response = GenerationResponse(text=text, model=generator.model_name)
        console.print(response.model_dump_json(indent=2))
    else:
        title = request.full_name or "Synthèse orthophonique"
        console.print(Panel(text, title=title, border_style="green"))


@app.command("tags")
def list_tags(
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Lecture or Écriture"),
):
    """List the accepted symptom tags."""
    selected = list(SymptomTag)
    if domain:
        wanted = {d for d in Domain if d.value.lower() == domain.lower() or d.name == domain.upper()}
        if not wanted:
            console.print(f"[red]Unknown domain: {domain}[/red]")
            raise typer.Exit(1)
        selected = [tag for tag in selected if tag.domain in wanted]

    table = Table(title=f"Symptom tags ({len(selected)})")
    table.add_column("Name", style="dim")
    table.add_column("Domain")
    table.add_column("Category")
    table.add_column("Observation")
    for tag in selected:
        table.add_row(tag.name, tag.domain.value, tag.category, tag.observation)
    console.print(table)


@app.command()
def stats(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of recent generations to show"),
):
    """Show generation telemetry from the local logs."""
    from tokensa.observability import ObservabilityLogger

    settings = get_settings()
    log_dir = settings.observability_log_dir

    if not log_dir.exists():
        console.print("[yellow]No logs found. Generate some reports first.[/yellow]")
        return

    # Read-only: a disabled logger never writes or creates directories
    obs = ObservabilityLogger(log_dir=log_dir, enabled=False)

    table = Table(title="Telemetry")
    table.add_column("Log")
    table.add_column("Events", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Error rate", justify="right")
    table.add_column("Avg duration", justify="right")
    for log_type, label in (("generations", "Generations"), ("llm", "LLM calls")):
        summary = obs.get_stats(log_type)
        if not summary["total"]:
            table.add_row(label, "0", "-", "-", "-")
            continue
        table.add_row(
            label,
            str(summary["total"]),
            str(summary["errors"]),
            f"{summary['error_rate']:.0%}",
            f"{summary['avg_duration_ms']:.0f}ms",
        )
    console.print(table)

    recent = obs.get_recent_events("generations", limit=limit)
    if recent:
        table = Table(title=f"Recent generations ({len(recent)})")
        table.add_column("Time")
        table.add_column("Mode")
        table.add_column("Tags", justify="right")
        table.add_column("Chars", justify="right")
        table.add_column("Status")
        for event in reversed(recent):
            ok = event.get("event_type") == "generation_success"
            table.add_row(
                str(event.get("timestamp", ""))[:19],
                str(event.get("mode", "")),
                str(event.get("tag_count", 0)),
                str(event.get("output_chars") or "-"),
                "[green]OK[/green]" if ok else f"[red]{event.get('error_type') or 'error'}[/red]",
            )
        console.print(table)


@app.command()
def version():
    """Show version information."""
    from tokensa import __version__

    console.print(f"Tokensa v{__version__}")
