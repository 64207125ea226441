"""
Main CLI entry point.

``docmirror`` runs one sync to completion and exits: 0 when the run finished
(per-file failures included), 1 on a configuration or fatal run failure.
"""

from pathlib import Path

import typer

from docmirror.config import load_config
from docmirror.exceptions import ConfigurationError, DocMirrorError
from docmirror.sync.orchestrator import run_sync
from docmirror.utils.logging import get_logger, setup_logging_from_config

logger = get_logger("docmirror.cli")


app = typer.Typer(
    name="docmirror",
    help="Mirror a remote document tree into object storage and a metadata catalog",
    add_completion=False,
)


@app.command()
def sync() -> None:
    """
    Walk the remote tree, mirror changed files and record the run.
    """
    project_dir = Path.cwd()
    try:
        config = load_config(project_dir)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    setup_logging_from_config(config, project_dir)

    try:
        summary = run_sync(config)
    except DocMirrorError as e:
        logger.error(f"Sync failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    except Exception as e:
        logger.exception(f"Unexpected error during sync: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(
        f"Scanned {summary.files_scanned}, updated {summary.files_changed}, "
        f"skipped {summary.files_skipped}, failed {summary.files_failed}"
    )


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
