"""Console output reporter using Rich.

This module renders validation results as formatted tables for terminal
display. Keys are only ever shown in their masked form.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from ai_key_validator.core.models import ErrorKind

if TYPE_CHECKING:
    from ai_key_validator.core.models import PatternResult, ValidationResult, ValidationStats
    from ai_key_validator.providers.base import BaseProvider


class ConsoleReporter:
    """Rich console reporter for validation results.

    Example:
        ```python
        reporter = ConsoleReporter()
        reporter.print_results(results, labels)
        reporter.print_summary(ValidationStats.from_results(results))
        ```
    """

    # Status colors
    STATUS_COLORS: ClassVar[dict[str, str]] = {
        "valid": "green",
        "invalid": "red",
        "error": "yellow",
    }

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        """Initialize the console reporter.

        Args:
            console: Rich Console instance (creates one if None).
            verbose: Whether to show suggestions and metadata.
        """
        self.console = console or Console()
        self.verbose = verbose

    @staticmethod
    def status_of(result: ValidationResult) -> str:
        """Bucket a result into valid, invalid or error."""
        if result.valid:
            return "valid"
        if result.error_kind is not None and (
            result.error_kind.is_pattern_error or result.error_kind is ErrorKind.AUTH_INVALID
        ):
            return "invalid"
        return "error"

    def _status_text(self, status: str) -> Text:
        return Text(status.upper(), style=f"bold {self.STATUS_COLORS[status]}")

    def print_results(
        self,
        results: Sequence[ValidationResult],
        labels: Sequence[str] | None = None,
    ) -> None:
        """Print results in a formatted table.

        Args:
            results: Results to display.
            labels: Masked key labels aligned with ``results``.
        """
        if not results:
            self.console.print("[dim]No keys validated.[/dim]")
            return

        table = Table(
            title="Validation Results",
            show_header=True,
            header_style="bold magenta",
            border_style="bright_blue",
        )
        table.add_column("Provider", style="cyan", no_wrap=True)
        if labels is not None:
            table.add_column("Key", style="dim")
        table.add_column("Status", no_wrap=True)
        table.add_column("Kind", style="yellow")
        table.add_column("HTTP", justify="right")
        table.add_column("Message")
        table.add_column("Time", justify="right", style="blue")

        for index, result in enumerate(results):
            row: list[str | Text] = [result.provider]
            if labels is not None:
                row.append(labels[index])
            row += [
                self._status_text(self.status_of(result)),
                result.error_kind.value if result.error_kind else "-",
                str(result.http_status) if result.http_status else "-",
                result.message,
                "cached" if result.served_from_cache else f"{result.elapsed_ms:.0f} ms",
            ]
            table.add_row(*row)

        self.console.print(table)

        if self.verbose:
            for result in results:
                self.print_suggestions(result)

    def print_suggestions(self, result: ValidationResult) -> None:
        """Print the remediation hints and metadata of a result."""
        if result.suggestions:
            self.console.print(f"[bold]{result.provider}[/bold] suggestions:")
            for suggestion in result.suggestions:
                self.console.print(f"  • {suggestion}")
        for key, value in sorted(result.metadata.items()):
            self.console.print(f"  [dim]{key}:[/dim] {value}")

    def print_pattern(self, result: PatternResult, label: str) -> None:
        """Print a single pattern check outcome."""
        status = "valid" if result.valid else "invalid"
        self.console.print(
            f"{label} [cyan]{result.provider}[/cyan] ",
            self._status_text(status),
            f" {result.message}",
        )

    def print_summary(self, stats: ValidationStats) -> None:
        """Print summary statistics.

        Args:
            stats: Aggregated counts to display.
        """
        self.console.print()
        table = Table(
            title="Validation Summary",
            show_header=True,
            header_style="bold",
            border_style="yellow",
        )
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="yellow")

        table.add_row("Total", str(stats.total))
        table.add_row("Valid", Text(str(stats.valid), style="bold green"))
        table.add_row("Invalid", Text(str(stats.invalid), style="bold red"))
        table.add_row("From Cache", str(stats.cached))
        for kind, count in sorted(stats.by_kind.items(), key=lambda x: x[1], reverse=True):
            table.add_row(f"  {kind}", str(count))

        self.console.print(table)

    def print_providers(self, providers: Sequence[BaseProvider]) -> None:
        """Print the registered providers and their key formats."""
        table = Table(title="Supported Providers", header_style="bold magenta")
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Aliases", style="dim")
        table.add_column("Prefix", style="green")
        table.add_column("Length", justify="right")
        table.add_column("Endpoint", style="blue")

        for provider in sorted(providers, key=lambda p: p.name):
            key_format = provider.key_format
            table.add_row(
                provider.name,
                provider.display_name,
                ", ".join(provider.aliases) or "-",
                key_format.prefix,
                key_format.describe_length(),
                provider.validation_endpoint,
            )

        self.console.print(table)

    def print_error(self, message: str) -> None:
        """Print an error message.

        Args:
            message: Error message to display.
        """
        self.console.print(f"[bold red]Error:[/bold red] {message}")

    def print_banner(self, title: str) -> None:
        """Print a styled header."""
        self.console.print(Panel(f"[bold blue]{title}[/bold blue]", border_style="blue"))

    def create_progress(self) -> Progress:
        """Create a progress bar for batch validation."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self.console,
            transient=True,
        )
