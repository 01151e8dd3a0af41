from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from codesync import engine, report
from codesync.config import ScanSettings, resolve_scan_settings
from codesync.discovery import SourceCache, iter_source_paths, scan_paths
from codesync.exceptions import UnknownLabelError
from codesync.model import Snapshot

app = typer.Typer(add_completion=False, help="Keep distant pieces of code in sync.")

logger = logging.getLogger(__name__)

_ROOT_OPTION = typer.Option(
    Path("."),
    "--root",
    exists=True,
    file_okay=False,
    dir_okay=True,
    help="Directory to scan.",
)
_CONFIG_OPTION = typer.Option(
    None, "--config", help="Config file (default: <root>/codesync.toml)."
)
_EXCLUDE_OPTION = typer.Option(
    None, "--exclude", help="Glob of paths to skip; may be repeated."
)
_JOBS_OPTION = typer.Option(None, "--jobs", "-j", min=1, help="Parallel scan workers.")
_HIDDEN_OPTION = typer.Option(
    None, "--hidden/--no-hidden", help="Also scan dot-files and dot-directories."
)
_IGNORE_OPTION = typer.Option(
    None,
    "--ignore/--no-ignore",
    help="Honour .gitignore and .ignore files (default: on).",
)
_JSON_OPTION = typer.Option(False, "--json", help="Emit JSON instead of text.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _settings(
    *,
    root: Path,
    config: Path | None,
    exclude: list[str] | None,
    jobs: int | None,
    hidden: bool | None,
    ignore: bool | None,
) -> ScanSettings:
    return resolve_scan_settings(
        root=root,
        config_path=config,
        exclude=exclude,
        jobs=jobs,
        include_hidden=hidden,
        use_ignore_files=ignore,
    )


def collect_snapshot(root: Path, settings: ScanSettings) -> Snapshot:
    paths = iter_source_paths(
        root,
        exclude=settings.exclude,
        include_hidden=settings.include_hidden,
        use_ignore_files=settings.use_ignore_files,
    )
    logger.debug("scanning %s with %d worker(s)", root, settings.jobs)
    return scan_paths(paths, root=root, jobs=settings.jobs)


@app.command()
def check(
    root: Path = _ROOT_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    exclude: Optional[List[str]] = _EXCLUDE_OPTION,
    jobs: Optional[int] = _JOBS_OPTION,
    hidden: Optional[bool] = _HIDDEN_OPTION,
    ignore: Optional[bool] = _IGNORE_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """Verify that every label appears as many times as its comments declare."""
    root = root.resolve()
    settings = _settings(
        root=root, config=config, exclude=exclude, jobs=jobs, hidden=hidden, ignore=ignore
    )
    result = engine.check(collect_snapshot(root, settings))
    if json_output:
        typer.echo(report.dump_json(report.check_response(result)))
    else:
        typer.echo(report.render_check_text(result, source=SourceCache(root)))
    raise typer.Exit(code=0 if result.clean else 1)


@app.command()
def show(
    label: str = typer.Argument(..., help="Label to look up."),
    root: Path = _ROOT_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    exclude: Optional[List[str]] = _EXCLUDE_OPTION,
    jobs: Optional[int] = _JOBS_OPTION,
    hidden: Optional[bool] = _HIDDEN_OPTION,
    ignore: Optional[bool] = _IGNORE_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """Print the location of every comment carrying LABEL."""
    root = root.resolve()
    settings = _settings(
        root=root, config=config, exclude=exclude, jobs=jobs, hidden=hidden, ignore=ignore
    )
    snapshot = collect_snapshot(root, settings)
    try:
        locations = engine.show(snapshot, label)
    except UnknownLabelError as exc:
        if json_output:
            typer.echo(report.dump_json(report.show_response(label, ())))
        else:
            typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    if json_output:
        typer.echo(report.dump_json(report.show_response(label, locations)))
    else:
        typer.echo(report.render_show_text(locations))


@app.command("list")
def list_command(
    root: Path = _ROOT_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    exclude: Optional[List[str]] = _EXCLUDE_OPTION,
    jobs: Optional[int] = _JOBS_OPTION,
    hidden: Optional[bool] = _HIDDEN_OPTION,
    ignore: Optional[bool] = _IGNORE_OPTION,
    json_output: bool = _JSON_OPTION,
) -> None:
    """Print every label in use, sorted."""
    root = root.resolve()
    settings = _settings(
        root=root, config=config, exclude=exclude, jobs=jobs, hidden=hidden, ignore=ignore
    )
    labels = engine.list_labels(collect_snapshot(root, settings))
    if json_output:
        typer.echo(report.dump_json(report.list_response(labels)))
    elif labels:
        typer.echo(report.render_list_text(labels))
