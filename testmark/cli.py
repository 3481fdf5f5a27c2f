"""CLI entry point for testmark."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from testmark.config import TestmarkConfig, load_config, regen_requested
from testmark.config.loader import DEFAULT_CONFIG_TEMPLATE
from testmark.document import DirEnt, Document, Hunk, ParseError, build_dir_index, read_file
from testmark.fs import DocumentFS, walk
from testmark.output import dumps, write_file, write_file_with_patches
from testmark.patch import PatchAccumulator, ValidationError, patch

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="testmark",
    help="Inspect and update testmark fixture hunks embedded in markdown.",
)

config_app = typer.Typer(help="Manage testmark configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: TestmarkConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _configure_logging(cfg: TestmarkConfig) -> None:
    """Route stdlib logging through structlog, as console text or JSON lines.

    Replaces any handlers already on the root logger, so the latest call wins.
    """
    if cfg.log_format == "json":
        renderers: list[Any] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(_LOG_LEVELS[cfg.log_level])


def _get_config() -> TestmarkConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to testmark.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _configure_logging(_config)


def _load(file: str) -> Document:
    """Read a testmark file, turning failures into a clean CLI exit."""
    try:
        return read_file(file)
    except FileNotFoundError:
        rprint(f"[red]Error:[/red] no such file: {escape(file)}")
        raise typer.Exit(1)
    except ParseError as e:
        rprint(f"[red]Parse error:[/red] {escape(file)}: {escape(str(e))}")
        raise typer.Exit(1)


def _add_subtree(tree: Tree, ent: DirEnt) -> None:
    for child in ent.children.values():
        label = f"[cyan]{escape(child.name)}[/cyan]"
        if child.hunk is not None:
            label += f" [dim]({len(child.hunk.body)} bytes)[/dim]"
        _add_subtree(tree.add(label), child)


def _collect_files(paths: list[str], patterns: list[str]) -> list[Path]:
    files: list[Path] = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            for pattern in patterns:
                files.extend(sorted(f for f in path.rglob(pattern) if f.is_file()))
        else:
            files.append(path)
    return list(dict.fromkeys(files))


@app.command()
def hunks(
    file: str = typer.Argument(..., help="Markdown file containing testmark hunks"),
) -> None:
    """List the hunks in a file."""
    doc = _load(file)
    table = Table(title=f"Hunks in {escape(file)} ({len(doc.hunks)})")
    table.add_column("Name", style="cyan")
    table.add_column("Info", style="green")
    table.add_column("Line", justify="right")
    table.add_column("Size", justify="right")
    for doc_hunk in doc.hunks:
        table.add_row(
            escape(doc_hunk.name),
            escape(doc_hunk.info_string) or "-",
            str(doc_hunk.line_start + 1),
            f"{len(doc_hunk.body)} B",
        )
    rprint(table)


@app.command()
def show(
    file: str = typer.Argument(..., help="Markdown file containing testmark hunks"),
    name: str = typer.Argument(..., help="Full hunk name, e.g. one/two"),
) -> None:
    """Print the body of one hunk."""
    doc = _load(file)
    if name not in doc:
        rprint(f"[red]Error:[/red] no hunk named {escape(name)!r} in {escape(file)}")
        raise typer.Exit(1)
    typer.echo(doc.hunk(name).body.decode("utf-8", errors="replace"), nl=False)


@app.command()
def tree(
    file: str = typer.Argument(..., help="Markdown file containing testmark hunks"),
) -> None:
    """Show hunk names as a directory tree."""
    doc = _load(file)
    root = build_dir_index(doc)
    view = Tree(f"[bold]{escape(file)}[/bold]")
    _add_subtree(view, root)
    rprint(view)


@app.command()
def check(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to check")],
) -> None:
    """Parse every given file and report any that are malformed."""
    cfg = _get_config()
    files = _collect_files(paths, cfg.patterns)
    logger.debug("checking %d file(s)", len(files))
    if not files:
        rprint("[yellow]No files found.[/yellow]")
        raise typer.Exit(0)

    failures = 0
    for path in files:
        try:
            doc = read_file(path)
        except (OSError, ParseError) as e:
            failures += 1
            rprint(f"[red]FAIL[/red] {escape(str(path))}: {escape(str(e))}")
            continue
        rprint(f"[green]ok[/green]   {escape(str(path))} ({len(doc.hunks)} hunks)")

    if failures:
        rprint(f"\n[red]{failures} of {len(files)} file(s) failed to parse.[/red]")
        raise typer.Exit(1)
    rprint(f"\n[green]All {len(files)} file(s) parsed.[/green]")


@app.command(name="set")
def set_hunk(
    file: str = typer.Argument(..., help="Markdown file to update in place"),
    name: str = typer.Argument(..., help="Hunk to replace, or append if missing"),
    body: Annotated[
        str | None, typer.Option("--body", "-b", help="New body text")
    ] = None,
    from_file: Annotated[
        str | None, typer.Option("--from", "-f", help="Read the new body from a file")
    ] = None,
    info: Annotated[
        str | None, typer.Option("--info", "-i", help="Info string for the code fence")
    ] = None,
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the result instead of writing"),
) -> None:
    """Replace (or append) one hunk, leaving everything else untouched."""
    if (body is None) == (from_file is None):
        rprint("[red]Error:[/red] give exactly one of --body or --from")
        raise typer.Exit(1)
    if body is not None:
        new_body = body.encode("utf-8")
    else:
        try:
            new_body = Path(from_file).read_bytes()
        except OSError as e:
            rprint(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1)

    doc = _load(file)
    if info is None:
        info = doc.hunk(name).info_string if name in doc else ""

    try:
        new_doc = patch(doc, [Hunk(name=name, body=new_body, info_string=info)])
    except ValidationError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if dry_run:
        rprint(Syntax(dumps(new_doc), "markdown", theme="monokai"))
        return
    write_file(new_doc, file)
    action = "Updated" if name in doc else "Appended"
    rprint(f"[green]{action}[/green] {escape(name)} in {escape(file)}")


@app.command()
def extract(
    file: str = typer.Argument(..., help="Markdown file containing testmark hunks"),
    dest: str = typer.Argument(..., help="Directory to write hunk bodies into"),
) -> None:
    """Write every hunk body out as a file, using hunk names as paths."""
    doc = _load(file)
    out = Path(dest).resolve()
    written = 0
    for path, f in walk(DocumentFS(doc)):
        if not f.stat().is_file:
            continue
        target = (out / path).resolve()
        if not target.is_relative_to(out) or target == out:
            rprint(f"[yellow]Skipping[/yellow] {escape(path)!r}: escapes {escape(dest)}")
            continue
        if f.is_dir:
            rprint(f"[yellow]Skipping[/yellow] {escape(path)!r}: also a directory")
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(f.read())
        written += 1
    rprint(f"[green]Extracted[/green] {written} hunk(s) to {escape(dest)}")


@app.command()
def compare(
    file: str = typer.Argument(..., help="Markdown file containing testmark hunks"),
    actual: str = typer.Argument(..., help="Directory holding the actual output files"),
    regen: bool = typer.Option(False, "--regen", help="Rewrite hunks that differ"),
) -> None:
    """Compare hunks against files on disk, or regenerate them from those files."""
    cfg = _get_config()
    regen = regen or regen_requested(cfg)
    doc = _load(file)
    root = Path(actual)

    accum = PatchAccumulator()
    mismatched: list[str] = []
    missing: list[str] = []
    for doc_hunk in doc.hunks:
        candidate = root / doc_hunk.name
        if not candidate.is_file():
            missing.append(doc_hunk.name)
            continue
        data = candidate.read_bytes()
        if regen:
            accum.append_patch_if_body_differs(doc_hunk.hunk, data)
        elif data != doc_hunk.body:
            mismatched.append(doc_hunk.name)

    for name in missing:
        rprint(f"[dim]no file for[/dim] {escape(name)}")

    if regen:
        if write_file_with_patches(doc, file, accum):
            rprint(f"[green]Regenerated[/green] {len(accum)} hunk(s) in {escape(file)}")
        else:
            rprint("[green]Nothing to regenerate.[/green]")
        return

    for name in mismatched:
        rprint(f"[red]DIFF[/red] {escape(name)}")
    if mismatched:
        rprint(f"\n[red]{len(mismatched)} hunk(s) differ.[/red] Re-run with --regen to update.")
        raise typer.Exit(1)
    rprint("[green]All hunks match.[/green]")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default testmark.yaml in current directory."""
    target = Path("testmark.yaml")
    if target.exists() and not force:
        rprint("[yellow]testmark.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
