"""desahogo CLI — run the moderation and crisis checks from a terminal."""

import json
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from desahogo import __version__
from desahogo.errors import DesahogoError

console = Console()

_SEVERITY_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}


def _build_moderator(config_path: str | None, lexicon_path: str | None):
    from desahogo.moderation.config import load_config
    from desahogo.moderation.lexicon import load_lexicon
    from desahogo.moderation.moderator import ContentModerator

    config = load_config(config_path) if config_path else None
    lexicon = load_lexicon(lexicon_path) if lexicon_path else None
    return ContentModerator(config=config, lexicon=lexicon)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show moderation log records")
def main(verbose: bool):
    """desahogo — moderation for an anonymous mental-health community.

    Scores free text for crisis language, harassment, spam and formatting
    abuse, and suggests what to do with it.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ── Moderate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.option("--user", "-u", default="cli", help="User id the text is attributed to")
@click.option(
    "--type",
    "content_type",
    default="story",
    type=click.Choice(["story", "comment", "message", "profile"]),
)
@click.option("--config", "config_path", default=None, help="YAML moderation config")
@click.option("--lexicon", "lexicon_path", default=None, help="YAML lexicon file")
@click.option("--json", "as_json", is_flag=True, help="Print the verdict as JSON")
def moderate(text: str, user: str, content_type: str, config_path: str | None,
             lexicon_path: str | None, as_json: bool):
    """Moderate TEXT and print the verdict."""
    try:
        moderator = _build_moderator(config_path, lexicon_path)
    except DesahogoError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)

    result = moderator.moderate(text, user, content_type)

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    style = _SEVERITY_STYLES[result.severity.value]
    console.print(Panel(
        f"Action: [bold]{result.suggested_action.value}[/]\n"
        f"Severity: [{style}]{result.severity.value}[/]\n"
        f"Confidence: {result.confidence:.2f}\n"
        f"Auto-moderated: {'yes' if result.auto_moderated else 'no'}",
        title="Approved" if result.is_approved else "Not approved",
    ))

    if result.flags:
        table = Table(title=f"Flags ({len(result.flags)})")
        table.add_column("Type", style="cyan")
        table.add_column("Confidence", justify="right", style="green")
        table.add_column("Evidence")
        for flag in result.flags:
            table.add_row(flag.type.value, f"{flag.confidence:.2f}", ", ".join(flag.evidence)[:60])
        console.print(table)

    console.print(f"[dim]{result.explanation}[/]")


# ── Crisis ───────────────────────────────────────────────────────────


@main.command()
@click.argument("message")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON")
def crisis(message: str, as_json: bool):
    """Run the standalone crisis analyzer on MESSAGE."""
    from desahogo.crisis.analyzer import analyze_crisis_content

    analysis = analyze_crisis_content(message)

    if as_json:
        click.echo(json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2))
        return

    style = _SEVERITY_STYLES[analysis.severity.value]
    console.print(f"\nSeverity: [{style}]{analysis.severity.value}[/]")
    if analysis.keywords:
        console.print(f"Keywords: {', '.join(analysis.keywords)}")
    if analysis.requires_alert:
        console.print("[bold red]Alert required[/]")
    console.print(f"Recommended: {analysis.recommended_action}")


@main.command()
def resources():
    """List emergency and support lines."""
    from desahogo.crisis.resources import get_crisis_resources

    for group, entries in get_crisis_resources().items():
        table = Table(title=group.capitalize())
        table.add_column("Name", style="cyan")
        table.add_column("Phone", style="green")
        table.add_column("Available")
        table.add_column("Description")
        for r in entries:
            table.add_row(r.name, r.phone, r.available, r.description)
        console.print(table)


# ── Config ───────────────────────────────────────────────────────────


@main.group()
def config():
    """Inspect moderation configuration."""


@config.command(name="show")
@click.option("--config", "config_path", default=None, help="YAML moderation config")
def show_config(config_path: str | None):
    """Print the effective configuration as JSON."""
    from desahogo.moderation.config import ModerationConfig, load_config

    try:
        cfg = load_config(config_path) if config_path else ModerationConfig()
    except DesahogoError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)
    click.echo(json.dumps(cfg.model_dump(), indent=2))


if __name__ == "__main__":
    main()
