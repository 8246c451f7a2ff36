# /dbctl/dbctl.py
"""
dbctl - Manage a local PostgreSQL + pgAdmin compose project.
"""
import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from dbctl.core.compose import ComposeConfig
from dbctl.core.config import DbctlConfig, load_config
from dbctl.core.exceptions import ComposeFileNotFound, DbctlError, ResolutionError
from dbctl.core.ports import PortConflictResolver
from dbctl.core.runtime import ComposeRuntime
from dbctl.core.utils import setup_logging
from dbctl.ui.console import ConsoleUI

VERSION = "1.0.0"
console = Console()
ui = ConsoleUI(console)
logger = logging.getLogger('dbctl.cli')

class Dbctl:
    """Main dbctl application class."""

    def __init__(self, config: DbctlConfig):
        """Wire the runtime and the conflict resolver for one invocation."""
        self.config = config
        self.runtime = ComposeRuntime(config.runtime, env=config.compose_env())
        self._compose = None

    @property
    def compose(self) -> ComposeConfig:
        """Compose definition of the managed project, loaded on first use."""
        if self._compose is None:
            self._compose = ComposeConfig(self.config.project_dir, self.config.compose_file)
            logger.info(f"Using compose file: {self._compose.path}")
        return self._compose

    @property
    def project_dir(self) -> Path:
        try:
            return self.compose.project_dir
        except ComposeFileNotFound:
            return self.config.project_dir

    @property
    def resolver(self) -> PortConflictResolver:
        return PortConflictResolver(
            self.runtime,
            project_dir=self.project_dir,
            runtime_binary=self.config.runtime
        )

    def scan(self):
        """Current conflicts on the reserved ports."""
        return self.resolver.scan(self.config.reserved_ports)

def get_dbctl(ctx) -> Dbctl:
    """Get dbctl instance from the click context."""
    return ctx.obj['DBCTL']

# CLI Commands
@click.group(invoke_without_command=True)
@click.version_option(version=VERSION)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--env-file', type=click.Path(dir_okay=False), help='Read settings from this .env file')
@click.pass_context
def cli(ctx, debug, env_file):
    """dbctl - Manage the local PostgreSQL and pgAdmin containers"""
    ctx.ensure_object(dict)
    ctx.obj['DEBUG'] = debug

    try:
        config = load_config(env_file=env_file)
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

    log_file = setup_logging(debug, config.log_dir)
    ctx.obj['DBCTL'] = Dbctl(config)

    if debug:
        logger.debug("Debug mode enabled")
        logger.debug(f"Log file: {log_file}")
        logger.debug(f"Project directory: {config.project_dir}")

    if ctx.invoked_subcommand is None:
        ports = ', '.join(str(port) for port in config.reserved_ports)
        console.print(f"[bold cyan]dbctl v{VERSION}[/bold cyan]")
        console.print(f"Reserved ports: {ports}", soft_wrap=True)
        ui.display_commands(COMMANDS)

@cli.command()
@click.pass_context
def start(ctx):
    """Start the database and admin UI"""
    app = get_dbctl(ctx)
    try:
        compose_file = app.compose.path
        conflicts = app.scan()
        if conflicts:
            ui.display_conflicts(conflicts, app.resolver)
            console.print("\nRun [cyan]dbctl fix[/cyan] to free these ports, then start again.")
            sys.exit(1)

        with ui.status("Starting services..."):
            app.runtime.compose_up(compose_file)

        ui.print_success("Services started successfully")
        ui.display_connection_info(app.config)
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

@cli.command()
@click.pass_context
def stop(ctx):
    """Stop the database and admin UI"""
    app = get_dbctl(ctx)
    try:
        with ui.status("Stopping services..."):
            app.runtime.compose_down(app.compose.path)
        ui.print_success("Services stopped successfully")
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

@cli.command()
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def clean(ctx, yes):
    """Stop services and remove their volumes"""
    app = get_dbctl(ctx)
    try:
        compose_file = app.compose.path
        if not yes and not click.confirm("This will delete all database data. Continue?"):
            console.print("[yellow]Aborted[/yellow]")
            return

        with ui.status("Removing containers and volumes..."):
            app.runtime.compose_down(compose_file, volumes=True)
        ui.print_success("Containers and volumes removed")
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

@cli.command()
@click.pass_context
def status(ctx):
    """Show service status, port conflicts and connection info"""
    app = get_dbctl(ctx)
    try:
        containers = app.runtime.compose_ps(app.compose.path)
        ui.display_service_status(containers)

        conflicts = app.scan()
        ui.display_conflicts(conflicts, app.resolver)
        ui.display_connection_info(app.config)
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

@cli.command()
@click.option('--dry-run', is_flag=True, help='Only show what would be done')
@click.pass_context
def fix(ctx, dry_run):
    """Free reserved ports held by other containers"""
    app = get_dbctl(ctx)
    try:
        resolver = app.resolver
        conflicts = resolver.scan(app.config.reserved_ports)
    except DbctlError as e:
        ui.print_error(e)
        sys.exit(1)

    if not conflicts or dry_run:
        ui.display_conflicts(conflicts, resolver)
        return

    failed = 0
    for record in conflicts:
        ui.print_info(f"Freeing port {record.port.number} ({record.port.role})...")
        try:
            resolver.resolve(record)
            ui.print_success(f"Port {record.port.number} is free")
        except ResolutionError as e:
            ui.print_error(e)
            failed += 1

    if failed:
        console.print(f"[red]{failed} of {len(conflicts)} conflict(s) could not be resolved[/red]")
        sys.exit(1)

def main(args: Optional[list] = None):
    """Console script entry point; usage errors exit with status 1."""
    try:
        rv = cli.main(args=args, prog_name='dbctl', standalone_mode=False)
    except click.exceptions.Abort:
        console.print("Aborted!")
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    sys.exit(rv if isinstance(rv, int) else 0)

# Command descriptions for help display
COMMANDS = {
    'start': 'Start the database and admin UI',
    'stop': 'Stop the database and admin UI',
    'clean': 'Stop services and remove their volumes',
    'status': 'Show status, port conflicts and connection info',
    'fix': 'Free reserved ports held by other containers'
}

if __name__ == '__main__':
    main()
