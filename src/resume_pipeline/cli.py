"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from resume_pipeline.config import load_config
from resume_pipeline.errors import StageResult, ValidationError
from resume_pipeline.matching.profile_builder import build_success_profile
from resume_pipeline.models.context import RequestContext
from resume_pipeline.models.match import MatchResult
from resume_pipeline.pipeline.orchestrator import ResumePipeline

app = typer.Typer(
    name="resume-pipeline",
    help="Match a career library against a job and render a tailored resume.",
    no_args_is_help=True,
)
structure_app = typer.Typer(help="Show or save the resume section layout.", no_args_is_help=True)
app.add_typer(structure_app, name="structure")
console = Console()

_state: dict = {"config_path": None}

UserOption = typer.Option("local", "--user", "-u", help="Acting user id")


@app.callback()
def main(
    config: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _state["config_path"] = config


def _pipeline() -> ResumePipeline:
    return ResumePipeline.from_config(load_config(_state["config_path"]))


def _load_data(path: Path):
    """Read a JSON or YAML file."""
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _check(result: StageResult) -> None:
    if not result.success:
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)


@app.command("import-library")
def import_library(
    file: Path = typer.Argument(help="Library YAML/JSON file"),
    user: str = UserOption,
) -> None:
    """Load roles, accomplishments, entries, skills, education and contact details."""
    config = load_config(_state["config_path"])
    pipeline = ResumePipeline.from_config(config)
    try:
        counts = pipeline.library.import_library(user, _load_data(file) or {})
    except ValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Imported into {config.storage.resolved_db_path}")
    table.add_column("Records")
    table.add_column("Count", justify="right")
    for kind, count in counts.items():
        table.add_row(kind, str(count))
    console.print(table)


@app.command("build-profile")
def build_profile(
    file: Path = typer.Argument(help="Parsed job description JSON/YAML (company, role, requirements, keywords)"),
    output: Path = typer.Option(..., "--output", "-o", help="Write the success profile as JSON"),
) -> None:
    """Group parsed requirements into a success profile for `match`."""
    raw = _load_data(file) or {}
    try:
        profile = build_success_profile(
            raw.get("company", ""),
            raw.get("role", ""),
            raw.get("requirements", []),
            raw.get("keywords", []),
            raw.get("companyContext"),
        )
    except ValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    for theme in profile.key_themes:
        console.print(f"[bold]{theme.theme}:[/bold] {', '.join(theme.tags)}")
    output.write_text(profile.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    console.print(f"\n[green]Saved: {output}[/green]")


@app.command()
def match(
    profile: Path = typer.Argument(help="Success profile JSON/YAML file"),
    user: str = UserOption,
    output: Path = typer.Option(None, "--output", "-o", help="Write the match result as JSON"),
) -> None:
    """Rank library items against a success profile and list gaps."""
    pipeline = _pipeline()
    result = asyncio.run(pipeline.match(RequestContext(user), _load_data(profile)))
    _check(result)
    matched: MatchResult = result.data

    if matched.message:
        console.print(f"[yellow]{matched.message}[/yellow]")

    table = Table(title="Matches")
    table.add_column("Score", justify="right")
    table.add_column("Item")
    table.add_column("Requirements")
    for m in matched.matches:
        color = "green" if m.score >= 80 else "yellow" if m.score >= 60 else "dim"
        table.add_row(f"[{color}]{m.score}[/{color}]", m.text, ", ".join(m.matched_requirements))
    console.print(table)

    if matched.gaps:
        console.print("\n[yellow]Gaps:[/yellow]")
        for gap in matched.gaps:
            best = f" (best: {gap.best_match_score})" if gap.best_match_text else ""
            console.print(f"  - {gap.requirement}{best}")

    if output:
        output.write_text(matched.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"\n[green]Saved: {output}[/green]")


@app.command()
def generate(
    matches: Path = typer.Argument(help="Match result JSON written by `match --output`"),
    company: str = typer.Option(..., "--company", help="Target company"),
    role: str = typer.Option(..., "--role", help="Target role"),
    summary: str = typer.Option(None, "--summary", help="Professional summary override"),
    user: str = UserOption,
) -> None:
    """Synthesize resume markup from matches and store it."""
    raw = _load_data(matches)
    items = raw.get("matches", []) if isinstance(raw, dict) else raw
    pipeline = _pipeline()
    result = asyncio.run(
        pipeline.generate(RequestContext(user), company, role, items, summary=summary)
    )
    _check(result)

    console.print(Panel(result.data["markdown"], title=f"Resume {result.data['resumeId']}"))
    if "message" in result.data:
        console.print(f"[yellow]{result.data['message']}[/yellow]")


@app.command()
def render(
    resume_id: str = typer.Argument(help="Generated resume id"),
    user: str = UserOption,
) -> None:
    """Render a stored resume to .docx."""
    pipeline = _pipeline()
    result = asyncio.run(pipeline.render(RequestContext(user), resume_id))
    _check(result)
    console.print(f"[green]DOCX: {result.data['docxUrl']}[/green]")


@app.command("render-markup")
def render_markup(
    file: Path = typer.Argument(help="Resume markup (.md) file"),
    output: Path = typer.Option(..., "--output", "-o", help="Output .docx path"),
) -> None:
    """Render a markup file directly, without storing it."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    pipeline = _pipeline()
    result = asyncio.run(pipeline.render_markup(file.read_text(encoding="utf-8"), output))
    _check(result)
    console.print(f"[green]DOCX saved: {result.data['path']}[/green]")


@structure_app.command("show")
def structure_show(user: str = UserOption) -> None:
    """Print the resume structure in effect."""
    pipeline = _pipeline()
    result = asyncio.run(pipeline.get_structure(RequestContext(user)))
    _check(result)
    resolution = result.data

    if not resolution.confirmed:
        console.print("[yellow]No saved structure; showing the default.[/yellow]")
    structure = resolution.structure
    console.print(f"[bold]Contact:[/bold] {', '.join(structure.contact_fields)}")
    console.print(f"[bold]Role summaries:[/bold] {'yes' if structure.include_role_summaries else 'no'}")
    for i, section in enumerate(structure.sections, 1):
        console.print(f"  {i}. {section.label} [dim]({section.type})[/dim]")


@structure_app.command("set")
def structure_set(
    file: Path = typer.Argument(help="Structure JSON/YAML file"),
    user: str = UserOption,
) -> None:
    """Save the resume structure used for future resumes."""
    pipeline = _pipeline()
    result = asyncio.run(pipeline.save_structure(RequestContext(user), _load_data(file)))
    _check(result)
    console.print(f"[green]Saved structure with {len(result.data.sections)} sections.[/green]")


if __name__ == "__main__":
    app()
