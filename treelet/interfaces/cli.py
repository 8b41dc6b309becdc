"""
Command line interface for Treelet.
"""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click

from ..infrastructure.error_handler import DownloadError
from ..models import DownloadResult, DownloadStatus, FilterCriteria, MirrorConfig
from ..models.config import DEFAULT_REF, DEFAULT_ROOT_FOLDERS, DEFAULT_STATE_DIR
from .api import GitLabMirror


TOKEN_ENVVAR = "REPOSITORY_TOKEN"


async def run_mirror(
    config: MirrorConfig,
    force: bool = False,
    reset_cache: bool = False,
    verbose: bool = False
) -> DownloadResult:
    async with GitLabMirror(config, verbose=verbose) as mirror:
        if reset_cache and mirror.reset_cache():
            click.echo("Cleared stored run state.")
        return await mirror.mirror(force=force)


def print_summary(result: DownloadResult) -> None:
    if result.status is DownloadStatus.SKIPPED:
        click.echo(f"Already up to date (revision {result.revision_id}).")
        return

    if result.matched_files and not result.downloaded_files:
        click.echo(f"Dry-run: {len(result.matched_files)} files would be downloaded.")
        return

    click.echo(
        f"Downloaded {len(result.downloaded_files)} files "
        f"({result.bytes_written} bytes), "
        f"{len(result.failed_files)} failed, "
        f"{len(result.failed_folders)} folders unreadable, "
        f"{len(result.ignored_folders)} folders ignored."
    )
    for path, reason in sorted(result.failed_files.items()):
        click.echo(f"  failed: {path}: {reason}", err=True)
    for path, reason in sorted(result.failed_folders.items()):
        click.echo(f"  unreadable: {path}: {reason}", err=True)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--token", "-t",
    envvar=TOKEN_ENVVAR,
    required=True,
    help=f"GitLab Personal Access Token (defaults to ${TOKEN_ENVVAR})",
)
@click.option("--host-url", "-u", required=True, help="GitLab host URL")
@click.option(
    "--project-id", "-p",
    required=True,
    help="GitLab numeric project ID or URL-style path (group/project)",
)
@click.option("--branch", "-b", default=DEFAULT_REF, show_default=True, help="Branch name")
@click.option(
    "--include-only", "-i",
    default=None,
    help="Comma-separated list of folders to include",
)
@click.option(
    "--dir", "-d", "destination",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to download files to (defaults to the current directory)",
)
@click.option(
    "--root", "-r", "root_folders",
    multiple=True,
    help=f"Root folder to scan, repeatable (default: {', '.join(DEFAULT_ROOT_FOLDERS)})",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Maximum number of concurrent requests",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retries for transient network errors",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=30.0,
    show_default=True,
    help="Request timeout in seconds",
)
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_STATE_DIR,
    show_default=True,
    help="Where run state is kept between invocations",
)
@click.option("--force", is_flag=True, help="Download even if nothing changed since the last run")
@click.option("--reset-cache", is_flag=True, help="Forget the stored run state first")
@click.option("--dry-run", is_flag=True, help="List what would be downloaded without writing")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="treelet")
def main(
    token: str,
    host_url: str,
    project_id: str,
    branch: str,
    include_only: Optional[str],
    destination: Optional[Path],
    root_folders: Tuple[str, ...],
    concurrency: int,
    retries: int,
    timeout: float,
    state_dir: Path,
    force: bool,
    reset_cache: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Mirror selected folders of a GitLab repository to local disk."""

    try:
        config = MirrorConfig(
            host_url=host_url,
            project_id=project_id,
            token=token,
            ref=branch,
            include_only=FilterCriteria.from_string(include_only),
            destination=destination or Path.cwd(),
            root_folders=root_folders or DEFAULT_ROOT_FOLDERS,
            max_concurrent_downloads=concurrency,
            timeout=timeout,
            max_retries=retries,
            state_dir=state_dir,
            dry_run=dry_run,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        result = asyncio.run(run_mirror(config, force, reset_cache, verbose))
    except DownloadError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    print_summary(result)


__all__ = ["main", "run_mirror", "print_summary"]
