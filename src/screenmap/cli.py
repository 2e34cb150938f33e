"""ScreenMap CLI - typer application entry point.

The CLI is a host shell around the document core: it loads a document file,
applies one edit, and writes the new snapshot back.
"""

from __future__ import annotations

import atexit
import json
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from screenmap.config import EditorConfig, load_config
from screenmap.document import (
    DocumentError,
    DocumentValidationError,
    add_additional_message,
    add_inspect_option,
    add_trigger,
    check_document,
    create_screen,
    delete_additional_message,
    delete_inspect_option,
    delete_screen,
    delete_trigger,
    load_document,
    new_document,
    rename_screen,
    save_document,
    set_background,
    set_key_item_unlocks,
    update_additional_message,
    update_inspect_option,
    update_trigger,
)
from screenmap.document.fields import coerce_field
from screenmap.models import INSPECT, AdditionalMessage, Option, Trigger
from screenmap.observability import (
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)
from screenmap.projection import LAYOUTS, project, render_dot, render_mermaid

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pydantic import BaseModel

    from screenmap.document import Document

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="screenmap",
    help="ScreenMap: edit screen-based game maps and project them as graphs.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

OUTPUT_FORMATS = ("json", "reactflow", "dot", "mermaid")

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False

DocumentArg = Annotated[Path, typer.Argument(help="Document JSON file.")]
ScreenArg = Annotated[str, typer.Argument(help="Screen ID.")]
DirectionArg = Annotated[str, typer.Argument(help="Direction (up, down, left, right, inspect).")]
IndexArg = Annotated[int, typer.Argument(help="Option position (0-based).")]
OrdinalArg = Annotated[int, typer.Argument(help="Progressive message ordinal (2 and up).")]
FieldArg = Annotated[str, typer.Argument(help="Field name.")]
ValueArg = Annotated[
    str,
    typer.Argument(
        help="New value. Kept as text when the field takes text, else read as JSON. "
        "'null' removes the field."
    ),
]
YesOpt = Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")]


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_file: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to logs/debug.jsonl next to the document.",
        ),
    ] = False,
) -> None:
    """ScreenMap: edit screen-based game maps and project them as graphs."""
    global _verbose, _log_enabled
    _verbose = verbose
    _log_enabled = log_file

    # File logging is configured later, once the document path is known
    configure_logging(verbosity=verbose)


# =============================================================================
# Helpers
# =============================================================================


def _configure_document_logging(document: Path) -> None:
    """Configure file logging if --log flag was set."""
    if _log_enabled:
        configure_logging(
            verbosity=_verbose, log_to_file=True, logs_root=document.resolve().parent
        )
        atexit.register(close_file_logging)
        log.info("file_logging_enabled", logs_dir=str(get_logs_dir()))


@contextmanager
def _document_errors() -> Iterator[None]:
    """Print DocumentError feedback and exit with status 1."""
    try:
        yield
    except DocumentError as e:
        log.info("operation_rejected", error=str(e))
        console.print(Markdown(e.to_feedback()))
        raise typer.Exit(1) from e


def _load_config(document: Path) -> EditorConfig:
    try:
        return load_config(document)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1) from e


def _load(document: Path) -> Document:
    _configure_document_logging(document)
    if not document.exists():
        console.print(f"[red]Error:[/red] Document '{document}' not found")
        raise typer.Exit(1)
    with _document_errors():
        return load_document(document)


def _save(doc: Document, document: Path) -> None:
    config = _load_config(document)
    save_document(doc, document, indent=config.indent)


def _parse_value(model: type[BaseModel], field_name: str, raw: str) -> Any:
    """Turn a command-line value into the value stored for *field_name*.

    The raw text is kept whenever the field accepts it as is, so IDs and
    labels such as ``2`` or ``true`` stay strings. Otherwise the text is
    decoded as JSON (objects, lists). ``null`` always removes the field.
    """
    if raw == "null":
        return None
    try:
        coerce_field(model, field_name, raw)
    except DocumentValidationError:
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


# =============================================================================
# CLI Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from screenmap import __version__

    console.print(f"ScreenMap v{__version__}")


@app.command()
def new(
    document: DocumentArg,
    screen: Annotated[
        str, typer.Option("--screen", "-s", help="ID of the initial screen.")
    ] = "start",
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file.")] = False,
) -> None:
    """Create a new document with a single screen."""
    if document.exists() and not force:
        console.print(f"[red]Error:[/red] '{document}' already exists (use --force)")
        raise typer.Exit(1)
    if not screen:
        console.print("[red]Error:[/red] Screen ID must be non-empty")
        raise typer.Exit(1)

    _save(new_document(screen), document)
    console.print(f"[green]✓[/green] Created [bold]{document}[/bold] with screen '{screen}'")


@app.command()
def screens(document: DocumentArg) -> None:
    """List the screens of a document."""
    doc = _load(document)

    table = Table(title=f"Screens: {document.name}")
    table.add_column("Screen", style="cyan")
    table.add_column("Background", style="dim")
    table.add_column("Triggers")
    table.add_column("Options", justify="right")

    for screen_id, screen in doc.items():
        triggers = screen.get("triggers") or {}
        options = (triggers.get(INSPECT) or {}).get("options") or []
        exits = []
        for direction, trigger in triggers.items():
            target = trigger.get("next_screen")
            exits.append(f"{direction} → {target}" if target else direction)
        table.add_row(
            screen_id,
            screen.get("background") or "-",
            ", ".join(exits) or "-",
            str(len(options)),
        )

    console.print()
    console.print(table)
    console.print()


@app.command("add-screen")
def add_screen(document: DocumentArg, screen: ScreenArg) -> None:
    """Add an empty screen."""
    doc = _load(document)
    with _document_errors():
        doc, screen_id = create_screen(doc, screen)
    _save(doc, document)
    console.print(f"[green]✓[/green] Added screen [bold]{screen_id}[/bold]")


@app.command("remove-screen")
def remove_screen(document: DocumentArg, screen: ScreenArg, yes: YesOpt = False) -> None:
    """Delete a screen. References to it from other screens are kept."""
    doc = _load(document)
    if not yes:
        typer.confirm(f"Delete screen '{screen}'?", abort=True)
    with _document_errors():
        result = delete_screen(doc, screen)
    _save(result.document, document)
    console.print(f"[green]✓[/green] Deleted screen [bold]{screen}[/bold]")
    console.print(f"  Current screen: {result.fallback}")


@app.command("rename-screen")
def rename_screen_command(
    document: DocumentArg,
    old: Annotated[str, typer.Argument(help="Current screen ID.")],
    new_id: Annotated[str, typer.Argument(metavar="NEW", help="New screen ID.")],
    retarget: Annotated[
        bool,
        typer.Option("--retarget/--no-retarget", help="Rewrite next_screen references."),
    ] = True,
) -> None:
    """Rename a screen."""
    doc = _load(document)
    with _document_errors():
        doc, screen_id = rename_screen(doc, old, new_id, retarget=retarget)
    _save(doc, document)
    console.print(f"[green]✓[/green] Renamed [bold]{old}[/bold] to [bold]{screen_id}[/bold]")


@app.command("set-background")
def set_background_command(
    document: DocumentArg,
    screen: ScreenArg,
    background: Annotated[str, typer.Argument(help="Background image reference.")],
) -> None:
    """Set a screen's background."""
    doc = _load(document)
    with _document_errors():
        doc = set_background(doc, screen, background)
    _save(doc, document)
    console.print(f"[green]✓[/green] {screen}.background = {background}")


@app.command("set-unlocks")
def set_unlocks(
    document: DocumentArg,
    screen: ScreenArg,
    direction: DirectionArg,
    items: Annotated[
        list[str] | None,
        typer.Argument(help="Item IDs required for the direction; none clears it."),
    ] = None,
) -> None:
    """Set the key items required to traverse a direction."""
    doc = _load(document)
    with _document_errors():
        doc = set_key_item_unlocks(doc, screen, direction, list(items or []))
    _save(doc, document)
    console.print(f"[green]✓[/green] {screen}.key_item_unlocks.{direction} = {items or []}")


@app.command("add-trigger")
def add_trigger_command(document: DocumentArg, screen: ScreenArg, direction: DirectionArg) -> None:
    """Add an empty trigger for a direction."""
    doc = _load(document)
    with _document_errors():
        doc = add_trigger(doc, screen, direction)
    _save(doc, document)
    console.print(f"[green]✓[/green] Added '{direction}' trigger to [bold]{screen}[/bold]")


@app.command("set-trigger")
def set_trigger(
    document: DocumentArg,
    screen: ScreenArg,
    direction: DirectionArg,
    field_name: FieldArg,
    value: ValueArg,
) -> None:
    """Set one field of a trigger."""
    doc = _load(document)
    with _document_errors():
        stored = _parse_value(Trigger, field_name, value)
        doc = update_trigger(doc, screen, direction, field_name, stored)
    _save(doc, document)
    console.print(f"[green]✓[/green] {screen}.triggers.{direction}.{field_name} updated")


@app.command("remove-trigger")
def remove_trigger(
    document: DocumentArg, screen: ScreenArg, direction: DirectionArg, yes: YesOpt = False
) -> None:
    """Delete a trigger."""
    doc = _load(document)
    if not yes:
        typer.confirm(f"Delete the '{direction}' trigger of '{screen}'?", abort=True)
    with _document_errors():
        doc = delete_trigger(doc, screen, direction)
    _save(doc, document)
    console.print(f"[green]✓[/green] Deleted '{direction}' trigger from [bold]{screen}[/bold]")


@app.command("add-option")
def add_option(
    document: DocumentArg,
    screen: ScreenArg,
    label: Annotated[str, typer.Option("--label", "-l", help="Option label.")] = "",
    message: Annotated[str, typer.Option("--message", "-m", help="Option message.")] = "",
    next_screen: Annotated[
        str | None, typer.Option("--next", help="Screen the option leads to.")
    ] = None,
) -> None:
    """Append an option to the screen's inspect trigger."""
    doc = _load(document)
    fields: dict[str, Any] = {"label": label, "message": message}
    if next_screen:
        fields["next_screen"] = next_screen
    with _document_errors():
        doc, index, option_id = add_inspect_option(doc, screen, **fields)
    _save(doc, document)
    console.print(f"[green]✓[/green] Added option {index} (id {option_id}) to [bold]{screen}[/bold]")


@app.command("set-option")
def set_option(
    document: DocumentArg,
    screen: ScreenArg,
    index: IndexArg,
    field_name: FieldArg,
    value: ValueArg,
) -> None:
    """Set one field of an inspect option."""
    doc = _load(document)
    with _document_errors():
        stored = _parse_value(Option, field_name, value)
        doc = update_inspect_option(doc, screen, index, field_name, stored)
    _save(doc, document)
    console.print(f"[green]✓[/green] {screen} option {index}.{field_name} updated")


@app.command("remove-option")
def remove_option(
    document: DocumentArg, screen: ScreenArg, index: IndexArg, yes: YesOpt = False
) -> None:
    """Delete an inspect option. Later options move up one position."""
    doc = _load(document)
    if not yes:
        typer.confirm(f"Delete option {index} of '{screen}'?", abort=True)
    with _document_errors():
        doc = delete_inspect_option(doc, screen, index)
    _save(doc, document)
    console.print(f"[green]✓[/green] Deleted option {index} from [bold]{screen}[/bold]")


@app.command("add-message")
def add_message(
    document: DocumentArg,
    screen: ScreenArg,
    index: IndexArg,
    message: Annotated[str, typer.Option("--message", "-m", help="Message text.")] = "",
) -> None:
    """Add a progressive message to an inspect option."""
    doc = _load(document)
    with _document_errors():
        doc, ordinal = add_additional_message(doc, screen, index, message)
    _save(doc, document)
    console.print(f"[green]✓[/green] Added message {ordinal} to {screen} option {index}")


@app.command("set-message")
def set_message(
    document: DocumentArg,
    screen: ScreenArg,
    index: IndexArg,
    ordinal: OrdinalArg,
    field_name: FieldArg,
    value: ValueArg,
) -> None:
    """Set one field of a progressive message."""
    doc = _load(document)
    with _document_errors():
        stored = _parse_value(AdditionalMessage, field_name, value)
        doc = update_additional_message(doc, screen, index, ordinal, field_name, stored)
    _save(doc, document)
    console.print(f"[green]✓[/green] {screen} option {index} message {ordinal} updated")


@app.command("remove-message")
def remove_message(
    document: DocumentArg, screen: ScreenArg, index: IndexArg, ordinal: OrdinalArg
) -> None:
    """Delete a progressive message."""
    doc = _load(document)
    with _document_errors():
        doc = delete_additional_message(doc, screen, index, ordinal)
    _save(doc, document)
    console.print(f"[green]✓[/green] Deleted message {ordinal} from {screen} option {index}")


@app.command("project")
def project_command(
    document: DocumentArg,
    layout: Annotated[
        str | None,
        typer.Option("--layout", help=f"Layout: {', '.join(LAYOUTS)} (default from config)."),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help=f"Output format: {', '.join(OUTPUT_FORMATS)}."),
    ] = "json",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout.")
    ] = None,
    no_labels: Annotated[
        bool, typer.Option("--no-labels", help="Omit edge labels (dot/mermaid).")
    ] = False,
) -> None:
    """Project the document as a node/edge graph."""
    if output_format not in OUTPUT_FORMATS:
        console.print(
            f"[red]Error:[/red] Unknown format '{output_format}'. "
            f"Use one of: {', '.join(OUTPUT_FORMATS)}"
        )
        raise typer.Exit(1)

    doc = _load(document)
    config = _load_config(document)
    chosen = layout or config.layout
    if chosen not in LAYOUTS:
        console.print(f"[red]Error:[/red] Unknown layout '{chosen}'")
        raise typer.Exit(1)

    projection = project(doc, chosen, settings=config.layout_settings)
    if output_format == "dot":
        text = render_dot(projection, no_labels=no_labels)
    elif output_format == "mermaid":
        text = render_mermaid(projection, no_labels=no_labels)
    elif output_format == "reactflow":
        text = json.dumps(projection.to_react_flow(), indent=config.indent)
    else:
        text = json.dumps(projection.to_dict(), indent=config.indent)

    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    console.print(
        f"[green]✓[/green] Wrote {len(projection.nodes)} nodes, "
        f"{len(projection.edges)} edges to {output}"
    )


@app.command()
def check(
    document: DocumentArg,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as failures.")] = False,
) -> None:
    """Report dangling references and unobtainable key items."""
    doc = _load(document)
    report = check_document(doc)

    icons = {
        "pass": "[green]✓[/green]",
        "warn": "[yellow]![/yellow]",
        "fail": "[red]✗[/red]",
    }
    for item in report.checks:
        console.print(f"  {icons[item.severity]} {item.message}")
    console.print()
    console.print(f"[bold]Summary:[/bold] {report.summary}")

    if report.has_failures or (strict and report.has_warnings):
        raise typer.Exit(1)


@app.command("format")
def format_command(document: DocumentArg) -> None:
    """Validate a document and rewrite it with the configured indentation."""
    doc = _load(document)
    _save(doc, document)
    console.print(f"[green]✓[/green] Formatted {document} ({len(doc)} screens)")
