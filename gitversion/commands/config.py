import click
import json
from pathlib import Path

from ..config import get_config_path, get_default_config, load_config, save_config
from .version import handle_errors


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option('--dir', '-C', 'start_dir', default='.', type=click.Path(file_okay=False),
              help='Project directory (default: current directory)')
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@handle_errors
def show_config(start_dir, pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON.
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        config_path = get_config_path(start_dir)
        print(json.dumps({"config_path": str(config_path) if config_path else None}))
        return

    config = load_config(start_dir)

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command("init")
@click.option('--dir', '-C', 'start_dir', default='.', type=click.Path(file_okay=False),
              help='Project directory (default: current directory)')
@click.option('--format', 'fmt', type=click.Choice(['json', 'toml', 'yaml']), default='json',
              help='File format (default: json)')
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@handle_errors
def init_config(start_dir, fmt, force):
    """Write a default .gitversion file into the project directory."""
    config_path = Path(start_dir) / f".gitversion.{fmt}"
    if config_path.exists() and not force:
        click.echo(f"{config_path} already exists (use --force to overwrite)", err=True)
        raise SystemExit(1)

    config = get_default_config()
    del config["logging"]
    save_config(config, config_path)
    click.echo(f"Configuration created at {config_path}")
