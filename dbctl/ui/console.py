"""Console UI for dbctl."""
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from dbctl.core.exceptions import handle_error

class ConsoleUI:
    """UI class for console output."""
    def __init__(self, console=None):
        self.console = console or Console()

    def print_error(self, error, show_traceback=False):
        """Print error message."""
        self.console.print(f"[red]Error:[/red] {handle_error(error)}", soft_wrap=True)
        if show_traceback:
            self.console.print_exception()

    def print_success(self, message):
        self.console.print(f"[green]{message}[/green]", soft_wrap=True)

    def print_info(self, message):
        self.console.print(f"[cyan]{message}[/cyan]", soft_wrap=True)

    def status(self, message):
        """Spinner shown while a runtime call blocks."""
        return self.console.status(f"[cyan]{message}[/cyan]", spinner="dots")

    def display_conflicts(self, conflicts, resolver):
        """Print one remediation hint per conflict."""
        if not conflicts:
            self.console.print("[green]No port conflicts detected[/green]")
            return
        self.console.print(f"[yellow]{len(conflicts)} port conflict(s) detected:[/yellow]")
        for record in conflicts:
            self.console.print(f"  - {resolver.describe(record)}", soft_wrap=True, highlight=False)

    def display_service_status(self, containers):
        """Display project containers in a table."""
        if not containers:
            self.console.print("[yellow]No containers running for this project[/yellow]")
            return

        table = Table(title="Service Status")
        table.add_column("Service", style="cyan")
        table.add_column("Container", style="blue")
        table.add_column("State")
        table.add_column("Ports", style="magenta")

        for container in containers:
            state = container.get('State', 'unknown')
            state_color = "green" if state == "running" else "red"
            table.add_row(
                container.get('Service', ''),
                container.get('Name', ''),
                f"[{state_color}]{state}[/{state_color}]",
                container.get('Publishers') and ', '.join(
                    f"{p.get('PublishedPort')}->{p.get('TargetPort')}"
                    for p in container['Publishers'] if p.get('PublishedPort')
                ) or container.get('Ports', '')
            )

        self.console.print(table)

    def display_connection_info(self, config):
        """Show how to reach the database and the admin UI."""
        lines = [
            f"Database:  {config.database_url}",
            f"Admin UI:  {config.admin_url}",
            f"Login:     {config.admin_email} / {config.admin_password}",
        ]
        self.console.print(Panel("\n".join(lines), title="Connection", expand=False),
                           highlight=False)

    def display_commands(self, commands):
        """Display available commands."""
        self.console.print("\n[bold cyan]Available Commands:[/bold cyan]")
        for name, description in commands.items():
            self.console.print(f"  {name:<10} - {description}")
        self.console.print("\nUse [cyan]dbctl COMMAND --help[/cyan] for more information about a command.")
