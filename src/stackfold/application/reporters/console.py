"""Console reporter: AnalysisResult -> rich formatted text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stackfold.application.reporters._base import BaseReporter, group_title, package_label
from stackfold.domain.model.enums import Location

if TYPE_CHECKING:
    from stackfold.domain.model.analysis_result import AnalysisResult
    from stackfold.domain.model.call import Call
    from stackfold.domain.model.goroutine import Goroutine

_LOCATION_STYLES = {
    Location.STDLIB: "green",
    Location.GO_MOD: "bold white",
    Location.GOPATH: "bold white",
    Location.GO_PKG: "cyan",
    Location.VENDOR: "cyan",
    Location.UNKNOWN: "white",
}


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Configuration for console reporter.

    All fields have defaults. Immutable (frozen dataclass).

    Attributes:
        show_args: Show call arguments.
        show_prefix: Show the text printed before the dump (panic message).
        max_groups: Max groups to display. None = unlimited.
        width: Console width in characters.
        force_terminal: Emit colors even when output is not a tty.
    """

    show_args: bool = True
    show_prefix: bool = True
    max_groups: int | None = None
    width: int = 120
    force_terminal: bool = True


class ConsoleReporter(BaseReporter):
    """Console reporter: outputs rich formatted text.

    One table per group, frames leaf first, colored by location.
    """

    def __init__(self, output: TextIO | None = None, config: ConsoleConfig | None = None) -> None:
        """Initialize reporter.

        Args:
            output: Output stream (default: sys.stdout)
            config: Reporter configuration. Uses defaults if None.
        """
        super().__init__(output)
        self._config = config or ConsoleConfig()

    def report(self, result: AnalysisResult) -> None:
        """Report analysis results as rich formatted text.

        Args:
            result: Parsed and aggregated dump
        """
        console = Console(
            file=self._output,
            force_terminal=self._config.force_terminal,
            width=self._config.width,
        )

        if self._config.show_prefix and result.scan.prefix.strip():
            console.print(result.scan.prefix.rstrip("\n"), style="bold red", markup=False, highlight=False)
            console.print()

        self._render_header(console, result)

        groups = result.groups
        if self._config.max_groups is not None:
            groups = groups[: self._config.max_groups]
        for goroutine in groups:
            self._render_group(console, goroutine)

        if len(groups) < result.group_count:
            console.print(f"[dim]... {result.group_count - len(groups)} more groups[/dim]")
        if result.scan.unclassified:
            console.print(f"[yellow]Unclassified lines:[/yellow] {len(result.scan.unclassified)}")
        if result.scan.truncated is not None:
            console.print(f"[bold red]TRUNCATED[/bold red] {escape(str(result.scan.truncated))}", highlight=False)

    def _render_header(self, console: Console, result: AnalysisResult) -> None:
        """Render header with summary."""
        console.rule("[bold]GOROUTINES[/bold]")
        console.print(
            f"[bold]Goroutines:[/bold] {result.goroutine_count}  "
            f"[bold]Groups:[/bold] {result.group_count}  "
            f"[bold]Policy:[/bold] {result.policy.name}"
        )
        console.print()

    def _render_group(self, console: Console, goroutine: Goroutine) -> None:
        """Render one group as a table."""
        title = group_title(goroutine)
        if goroutine.first:
            title = f"{title} [first]"

        console.print(escape(title), style="bold", highlight=False)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("package")
        table.add_column("source")
        table.add_column("function")

        for call in reversed(goroutine.signature.stack.calls):
            table.add_row(*self._row(call))
        if goroutine.signature.stack.elided:
            table.add_row("", "", "(...)")

        created_by = goroutine.signature.created_by
        if created_by.calls:
            creator = created_by.calls[-1]
            suffix = f" in goroutine {goroutine.created_by_id}" if goroutine.created_by_id is not None else ""
            table.add_row("[dim]created by[/dim]", escape(creator.pkg_src), escape(f"{creator.func}{suffix}"))

        console.print(table)
        console.print()

    def _row(self, call: Call) -> tuple[str, str, str]:
        style = _LOCATION_STYLES[call.location]
        name = escape(call.func.name)
        if self._config.show_args:
            name = f"{name}({escape(str(call.args))})"
        if call.func.is_exported:
            name = f"[bold]{name}[/bold]"
        return f"[{style}]{escape(package_label(call))}[/{style}]", escape(call.pkg_src), name
