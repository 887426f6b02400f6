#!/usr/bin/env python3

import click

from gitversion import __version__
from gitversion.commands.version import name_cmd, code_cmd, show_cmd
from gitversion.commands.config import config_cmd


@click.group()
@click.version_option(version=__version__, prog_name="gitversion")
@click.option('--verbose', '-v', is_flag=True, help='Log git commands and resolution steps to stderr')
@click.pass_context
def cli(ctx, verbose):
    """gitversion - Version name and code from git tags.

    Derives a version name such as 1.2.3.4-8f51448-topic and a numeric
    version code such as 100020003 from the nearest version tag in the
    history of the current checkout. Nothing is written to the repository.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


cli.add_command(name_cmd)
cli.add_command(code_cmd)
cli.add_command(show_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
