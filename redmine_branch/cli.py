"""CLI entry point — command definitions using Click.

Commands:
    init      Generate a template config file
    create    Fetch a ticket and create its branch from the right base
    name      Print the branch name derived from a ticket
"""

import functools
import sys
from collections.abc import Sequence

import click

from redmine_branch import __version__


# ---------------------------------------------------------------------------
# Helpers shared by the ticket commands
# ---------------------------------------------------------------------------

def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _make_client(ctx: click.Context, api_key: str | None):
    """Load config and return a ready RedmineClient. Exits on error.

    A template config is written on first run so the user knows where to put
    the API key.
    """
    from redmine_branch.client import RedmineClient
    from redmine_branch.config import ConfigError, ensure_config, load

    config_path = ctx.obj["config_path"]
    _verbose(ctx, f"Reading config in '{config_path}'")
    try:
        if ensure_config(config_path):
            click.echo(f"No config found, storing default config file in '{config_path}'...", err=True)
        config = load(config_path, api_key=api_key)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    if not config.verify_ssl:
        _verbose(ctx, "TLS certificate verification is disabled")

    return RedmineClient(url=config.url, api_key=config.api_key, verify=config.verify_ssl)


def _fetch_issue(ctx: click.Context, ticket: int, api_key: str | None):
    from redmine_branch.models import parse_ticket

    client = _make_client(ctx, api_key)
    click.echo(f"Requesting {client.issue_url(ticket)}...", err=True)
    return parse_ticket(client.get_issue_body(ticket)).issue


def _prompt_base(options: Sequence[str]) -> int:
    """Ask which base branch to use; the first option is the default."""
    click.echo("This ticket has a parent, what branch should it be based on?")
    for index, option in enumerate(options):
        click.echo(f"  [{index}] {option}")
    return click.prompt(
        "Base branch",
        type=click.IntRange(0, len(options) - 1),
        default=0,
    )


def _handle_errors(func):
    """Decorator that catches tool exceptions and exits cleanly."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from redmine_branch.client import (
            AuthenticationError,
            NetworkError,
            NotFoundError,
            RedmineClientError,
        )
        from redmine_branch.models import TicketParseError
        from redmine_branch.naming import NamingError
        from redmine_branch.repository import RepositoryError

        try:
            return func(*args, **kwargs)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except RedmineClientError as exc:
            click.echo(f"Redmine error: {exc}", err=True)
            sys.exit(1)
        except TicketParseError as exc:
            click.echo(f'Unable to decode json "{exc.body}" => {exc}', err=True)
            sys.exit(1)
        except NamingError as exc:
            click.echo(f"Naming error: {exc}", err=True)
            sys.exit(1)
        except RepositoryError as exc:
            click.echo(f"Git error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file (default: per-user config dir).")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="redmine-new-branch")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Create a new git branch following your team naming."""
    from redmine_branch.config import default_config_path

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path or str(default_config_path())
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Overwrite an existing config file.")
@click.pass_context
def init_command(ctx: click.Context, force: bool) -> None:
    """Generate a template config file."""
    from redmine_branch.config import ConfigError, generate_template

    output_path = ctx.obj["config_path"]
    try:
        generate_template(output_path, force=force)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your Redmine URL and API key.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# name
# ---------------------------------------------------------------------------

@cli.command("name")
@click.option("-t", "--ticket", type=int, required=True, help="Redmine ticket number.")
@click.option("--api-key", default=None, help="Redmine API key (overrides config).")
@click.pass_context
@_handle_errors
def name_command(ctx: click.Context, ticket: int, api_key: str | None) -> None:
    """Print the branch name for TICKET."""
    issue = _fetch_issue(ctx, ticket, api_key)
    click.echo(issue.branch_name())


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------

@cli.command("create")
@click.option("-t", "--ticket", type=int, required=True, help="Redmine ticket number.")
@click.option("--api-key", default=None, help="Redmine API key (overrides config).")
@click.option("--remote", default=None,
              help="Remote to branch from (required when several remotes exist).")
@click.option("-d", "--dry-run", is_flag=True, default=False,
              help="Resolve everything but don't create the git branch.")
@click.option("-y", "--yes", "assume_default", is_flag=True, default=False,
              help="Never prompt; keep the default base branch.")
@click.pass_context
@_handle_errors
def create_command(ctx: click.Context, ticket: int, api_key: str | None,
                   remote: str | None, dry_run: bool, assume_default: bool) -> None:
    """Create and check out the branch for TICKET."""
    from redmine_branch.branching import Action, choose_default, create_new_branch
    from redmine_branch.repository import describe_workdir, open_repository

    issue = _fetch_issue(ctx, ticket, api_key)

    repo = open_repository()
    status = describe_workdir(repo)
    _verbose(ctx, f"Repo found at : {status.git_dir}")
    _verbose(ctx, "Repo is clean" if status.clean else "Repo has local changes")
    _verbose(ctx, f"Number of files changed in workdir = {status.files_changed}")

    chooser = choose_default if (dry_run or assume_default) else _prompt_base
    resolution = create_new_branch(repo, issue, chooser, remote=remote, dry_run=dry_run)

    for note in resolution.notes:
        click.echo(note)

    if resolution.action is Action.ALREADY_ON_BRANCH:
        click.echo(f"We are already in the desired branch {resolution.branch_name}")
    elif resolution.action is Action.TICKET_BRANCH_EXISTS:
        click.echo(
            f"I could create branch {resolution.branch_name} but the branch "
            f"{resolution.existing_branch} already exists for the ticket #{issue.id}"
        )
    elif resolution.created:
        click.echo(f"Created branch {resolution.branch_name} based on {resolution.base}")
    else:
        click.echo(f"Would create branch {resolution.branch_name} based on {resolution.base}")
