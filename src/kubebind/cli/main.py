#!/usr/bin/env python3
"""
KUBEBIND CLI
------------
Binds secret-backed credentials into every workload manifest under a
path: SERVICE_BINDING_ROOT env var, a read-only volume mount per
container, and the secret volume itself.
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)

from kubebind.cli.formatter import KubeFormatter
from kubebind.core.engine import BindingEngine
from kubebind.core.errors import MappingError
from kubebind.core.models import Binding
from kubebind.mapping.catalog import MappingCatalog

console = Console()

VERSION = "kubebind v0.1.0"


class KubeBindCLI:
    """
    Translates command-line arguments into BindingEngine runs.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubebind",
            description="KubeBind - Inject service binding credentials into Kubernetes workloads",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = KubeFormatter(console)
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-V", "--version", action="version", version=VERSION)
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        bind_parser = subparsers.add_parser("bind", help="🔗 Bind a secret into workload manifests")
        bind_parser.add_argument("path", help="Path to a YAML file or directory")
        bind_parser.add_argument("--name", required=True, help="Binding name (volume and mount directory)")
        bind_parser.add_argument("--secret", required=True, help="Name of the secret holding the credentials")
        bind_parser.add_argument("-c", "--container", action="append", default=[],
                                 help="Only bind this container (repeatable, default: all)")
        bind_parser.add_argument("-m", "--mapping", help="YAML file with pod mappings (default: spec.template layout)")
        bind_parser.add_argument("--dry-run", action="store_true", help="Preview results without writing")
        bind_parser.add_argument("--diff", action="store_true", help="Display a unified diff per file")
        bind_parser.add_argument("--ext", default=".yaml", help="File extension filter (default: .yaml)")
        bind_parser.add_argument("--max-depth", type=int, default=10,
                                 help="Maximum directory depth to scan (default: 10)")
        bind_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _run_bind(self, args: argparse.Namespace) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.exists():
            console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return 1

        try:
            catalog = MappingCatalog.load(args.mapping)
        except MappingError as e:
            console.print(f"[bold red]Mapping error:[/bold red] {e}")
            return 1

        binding = Binding(name=args.name, secret_ref=args.secret, containers=args.container)
        workspace = input_path if input_path.is_dir() else input_path.parent
        engine = BindingEngine(str(workspace), binding, catalog)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task_id = progress.add_task("Binding manifests...", total=None)

            def on_progress(done: int, total: int):
                progress.update(task_id, completed=done, total=total)

            if input_path.is_file():
                reports = [engine.bind_file(input_path.name, dry_run=args.dry_run)]
                on_progress(1, 1)
            else:
                reports = engine.scan_directory(
                    extension=args.ext,
                    dry_run=args.dry_run,
                    max_depth=args.max_depth,
                    progress_callback=on_progress
                )

        if not reports:
            console.print("\n[bold yellow]⚠️  No manifests found.[/bold yellow]")
            return 0

        if args.diff:
            for report in reports:
                if not report.get("bound_content"):
                    continue
                rel_path = report["file_path"]
                console.print(f"\n[bold cyan]Binding for: {rel_path}[/bold cyan]")
                self.formatter.show_change_logs(report.get("changes", []))
                self.formatter.display_diff(
                    self._read_original(workspace, rel_path, report),
                    report["bound_content"], rel_path
                )

        self.formatter.print_final_table(reports)
        self.formatter.print_summary(engine.generate_summary(reports))
        return 0 if all(r.get("success") for r in reports) else 1

    def _read_original(self, workspace: Path, rel_path: str, report: dict) -> str:
        """The pre-binding text: the backup once written, else the file itself."""
        source = workspace / (report.get("backup_created") or rel_path)
        return source.read_text(encoding='utf-8-sig')

    def run(self, argv: Optional[List[str]] = None) -> int:
        args = self.parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s"
        )

        if args.command == "bind":
            self.print_header("Service Binding Injector")
            return self._run_bind(args)

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeBindCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
