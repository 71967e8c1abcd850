# src/kubebind/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

console = Console()


class KubeFormatter:
    """
    Renders diffs, injection logs and the final execution report.
    """

    def __init__(self, out: Console = None):
        self.console = out or console

    def display_diff(self, original_text: str, bound_text: str, file_name: str):
        """Renders a colorized unified diff of the proposed binding."""
        if not bound_text or not original_text:
            return

        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            bound_text.splitlines(),
            fromfile=f"original/{file_name}",
            tofile=f"bound/{file_name}",
            lineterm=""
        ))

        if not diff_list:
            self.console.print(f"[dim]ℹ No changes needed for {file_name}.[/dim]")
            return

        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(
            syntax,
            title=f"Proposed Binding: {file_name}",
            border_style="green"
        ))

    def show_change_logs(self, logs: List[str]):
        for log in logs:
            self.console.print(f"[bold cyan]🔗 Binding Applied:[/bold cyan] {log}")

    def print_final_table(self, reports: List[Dict[str, Any]]):
        table = Table(title="KubeBind Execution Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Kinds", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            if r.get("error"):
                self.console.print(f"[bold red]Error in {r['file_path']}:[/bold red] {r['error']}")

            success = r.get("success", False)
            status_color = "green" if success else "red"
            table.add_row(
                str(r.get("file_path")),
                ", ".join(r.get("kinds") or []) or "-",
                f"[{status_color}]{r.get('status', 'FAILED')}[/{status_color}]",
                "✅" if success else "❌"
            )

        self.console.print(table)

    def print_summary(self, summary: Dict[str, Any]):
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:     {summary['total_files']}\n"
            f"Bound:           [green]{summary['bound']}[/green]\n"
            f"Written:         {summary['written_to_disk']}\n"
            f"System Errors:   [red]{summary['system_errors']}[/red]\n"
            f"Backups Created: {summary['backups_created']}",
            border_style="dim"
        ))
