"""CLI entrypoint for blogprune."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import SiteConfig, find_config, load_config
from .secrets import Credential, resolve_credential


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _config(ctx: click.Context) -> SiteConfig:
    return ctx.obj["config"]


def _credential(ctx: click.Context, token_ref: str | None) -> Credential | None:
    return resolve_credential(token_ref or _config(ctx).token_ref)


@click.group()
@click.version_option(__version__, prog_name="blogprune")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to blogprune.yaml (defaults to the nearest one above the cwd)",
)
@click.option("--verbose", is_flag=True, help="Log each storage call to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """blogprune - delete posts from a Git-backed site in one atomic commit."""
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if "config" in ctx.obj:
        return

    if config_path is None:
        config_path = find_config(Path.cwd())
    if config_path is None:
        ctx.obj["config"] = SiteConfig()
        return

    try:
        ctx.obj["config"] = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option(
    "--content-dir",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Local posts directory (defaults to layout.content_root under the cwd)",
)
@click.option("--date-format", type=str, default="%Y-%m-%d", show_default=True, help="strftime format for dates")
@click.pass_context
def archive(ctx: click.Context, content_dir: Path | None, date_format: str) -> None:
    """List posts grouped by year and month from a local checkout."""
    from .commands.archive_cmd import run_archive

    layout = _config(ctx).layout
    content_dir = content_dir or Path.cwd() / layout.content_root
    sys.exit(run_archive(content_dir, extensions=layout.content_extensions, date_format=date_format))


@cli.command()
@click.argument("slugs", nargs=-1, required=True)
@click.option(
    "--token-ref",
    type=str,
    default=None,
    metavar="REF",
    help="Token reference, e.g. env:GITHUB_TOKEN or file:~/.gh-token (overrides github.token_ref)",
)
@click.option("--dry-run", is_flag=True, help="Resolve and show the paths to delete without committing")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.option(
    "--prompt/--no-prompt",
    "allow_prompt",
    default=True,
    show_default=True,
    help="Ask for a token when none can be resolved",
)
@click.option("--retries", type=click.IntRange(min=0), default=0, show_default=True, help="Re-runs after a branch conflict")
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True, help="Parallel media listings")
@click.pass_context
def delete(
    ctx: click.Context,
    slugs: tuple[str, ...],
    token_ref: str | None,
    dry_run: bool,
    yes: bool,
    allow_prompt: bool,
    retries: int,
    workers: int,
) -> None:
    """Delete posts and their media in a single commit.

    Examples:

        blogprune delete hello-world

        GITHUB_TOKEN=... blogprune delete post-a post-b --yes --retries 2
    """
    from .commands.delete_cmd import run_delete

    cfg = _config(ctx)
    console = Console(stderr=True)

    if not dry_run and not yes:
        count = len(set(slugs))
        if not click.confirm(f"Delete {count} post{'s' if count != 1 else ''} from {cfg.branch}? This cannot be undone"):
            console.print("Aborted.", style="dim")
            sys.exit(1)

    def _prompt_token() -> Credential | None:
        console.print("A token is required to continue the delete.", style="yellow")
        token = click.prompt("GitHub token", hide_input=True, default="", show_default=False)
        return Credential(token=token.strip(), ref="prompt") if token.strip() else None

    try:
        exit_code = run_delete(
            cfg,
            list(slugs),
            credential=_credential(ctx, token_ref),
            store=ctx.obj.get("store"),
            dry_run=dry_run,
            retries=retries,
            workers=workers,
            prompt_token=_prompt_token if allow_prompt else None,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.option("--token-ref", type=str, default=None, metavar="REF", help="Token reference (overrides github.token_ref)")
@click.pass_context
def ping(ctx: click.Context, token_ref: str | None) -> None:
    """Check that the branch head can be read (non-destructive)."""
    from .commands.delete_cmd import run_ping

    try:
        exit_code = run_ping(_config(ctx), credential=_credential(ctx, token_ref), store=ctx.obj.get("store"))
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
