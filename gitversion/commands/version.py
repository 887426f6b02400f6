"""
Version commands for gitversion.

`name` and `code` print a single value for build scripts to capture;
`show` prints both, with the details behind them.
"""

import functools
import json
import sys

import click

from ..config import VersionConfig, configure_logging, load_config
from ..domain import UNKNOWN_CODE, UNKNOWN_VERSION
from ..errors import GitCommandError
from ..exit_codes import CommandError, get_exit_code_for_exception
from ..render import render_version_table
from ..services import VersionService


def handle_errors(f):
    """Turn fatal errors into a message on stderr and a matching exit code."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (GitCommandError, CommandError, OSError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(get_exit_code_for_exception(e))
        except KeyboardInterrupt as e:
            click.echo("Interrupted", err=True)
            sys.exit(get_exit_code_for_exception(e))
    return wrapper


def version_options(f):
    """Options shared by every command that resolves a version."""
    f = click.option('--release-branch', 'release_branches', multiple=True,
                     help='Branch that gets no branch suffix (repeatable; default: master)')(f)
    f = click.option('--restrict-directory/--no-restrict-directory', default=None,
                     help='Only count commits touching the project directory')(f)
    f = click.option('--prefix', 'tag_prefix', default=None,
                     help='Literal text before the version number in tag names')(f)
    f = click.option('--dir', '-C', 'start_dir', default='.',
                     type=click.Path(file_okay=False),
                     help='Project directory (default: current directory)')(f)
    return f


def build_config(ctx, start_dir, tag_prefix=None, restrict_directory=None, release_branches=()):
    """Load project settings, apply command line overrides and set up logging."""
    raw = load_config(start_dir)
    verbose = bool(ctx.obj and ctx.obj.get('verbose'))
    logging_config = raw.get('logging', {})
    configure_logging(
        "DEBUG" if verbose else logging_config.get('level', 'WARNING'),
        logging_config.get('format', '%(levelname)s: %(message)s')
    )

    overrides = {
        'tag_prefix': tag_prefix,
        'restrict_directory': restrict_directory,
        'release_branches': list(release_branches) or None,
    }
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return VersionConfig.from_dict(raw)


@click.command('name')
@version_options
@click.pass_context
@handle_errors
def name_cmd(ctx, start_dir, tag_prefix, restrict_directory, release_branches):
    """Print the version name, MAIN[.COUNT-COMMIT][-BRANCH].

    \b
    MAIN    highest version tag on the nearest tagged commit
    COUNT   commits since that tag (omitted when 0)
    COMMIT  short id of HEAD (omitted when COUNT is 0)
    BRANCH  current branch (omitted on release branches and detached HEAD)

    Prints "unknown" when there is no repository, no commit or no tag.

    Examples:

    \b
        gitversion name
        gitversion name --prefix v --release-branch main
    """
    config = build_config(ctx, start_dir, tag_prefix, restrict_directory, release_branches)
    click.echo(VersionService(config).version_name(start_dir))


@click.command('code')
@click.option('--dir', '-C', 'start_dir', default='.', type=click.Path(file_okay=False),
              help='Project directory (default: current directory)')
@click.option('--prefix', 'tag_prefix', default=None,
              help='Literal text before the version number in tag names')
@click.pass_context
@handle_errors
def code_cmd(ctx, start_dir, tag_prefix):
    """Print the integer version code of the nearest version tag.

    Each number in the tag takes four decimal digits: 1.22.333 -> 100220333.
    Prints 0 when there is no repository, no commit or no tag.
    """
    config = build_config(ctx, start_dir, tag_prefix)
    click.echo(str(VersionService(config).version_code(start_dir)))


@click.command('show')
@version_options
@click.option('--json', 'json_output', is_flag=True, help='Output as a JSON object')
@click.option('--pretty', is_flag=True, help='Indent JSON output')
@click.option('--plain', is_flag=True, help='Tab separated gitversion.name / gitversion.code lines')
@click.pass_context
@handle_errors
def show_cmd(ctx, start_dir, tag_prefix, restrict_directory, release_branches,
             json_output, pretty, plain):
    """Show version name, version code and how they were derived."""
    config = build_config(ctx, start_dir, tag_prefix, restrict_directory, release_branches)
    spec = VersionService(config).resolve_or_none(start_dir)

    if spec is None:
        info = {'name': UNKNOWN_VERSION, 'code': UNKNOWN_CODE}
    else:
        info = spec.to_dict(config.release_branches)

    if json_output:
        click.echo(json.dumps(info, indent=2 if pretty else None, ensure_ascii=False))
    elif plain:
        click.echo(f"gitversion.name\t{info['name']}")
        click.echo(f"gitversion.code\t{info['code']}")
    else:
        render_version_table(info, title="gitversion")
