"""Plain text reporter using print().

Stdlib-only reporter for simple text output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stackfold.application.reporters._base import BaseReporter, group_title, package_label

if TYPE_CHECKING:
    from stackfold.domain.model.analysis_result import AnalysisResult
    from stackfold.domain.model.goroutine import Goroutine
    from stackfold.domain.model.stack import Stack


class PlainTextReporter(BaseReporter):
    """Plain text reporter using print().

    One section per group, frames leaf first as the runtime prints them.
    Outputs to stdout by default, can be configured for any TextIO.
    """

    def report(self, result: AnalysisResult) -> None:
        """Report analysis results as plain text.

        Args:
            result: Parsed and aggregated dump
        """
        if result.scan.prefix.strip():
            self._write(result.scan.prefix.rstrip("\n"))
            self._write()

        self._report_summary(result)
        for goroutine in result.groups:
            self._write()
            self._report_group(goroutine)

        if result.scan.unclassified:
            self._write()
            self._write(f"Unclassified lines: {len(result.scan.unclassified)}")
        if result.scan.truncated is not None:
            self._write()
            self._write(f"Truncated: {result.scan.truncated}")

    def _write(self, text: str = "") -> None:
        """Write line to output."""
        print(text, file=self._output)

    def _report_summary(self, result: AnalysisResult) -> None:
        """Print summary line."""
        self._write(
            f"Goroutines: {result.goroutine_count} in {result.group_count} groups (policy {result.policy.name})"
        )

    def _report_group(self, goroutine: Goroutine) -> None:
        """Print one group."""
        title = group_title(goroutine)
        if goroutine.first:
            title += " *first*"
        self._write(title)
        self._report_stack(goroutine.signature.stack)

        created_by = goroutine.signature.created_by
        if created_by.calls:
            creator = created_by.calls[-1]
            suffix = f" in goroutine {goroutine.created_by_id}" if goroutine.created_by_id is not None else ""
            self._write(f"    created by {creator.func}{suffix} @ {creator.pkg_src}")

    def _report_stack(self, stack: Stack) -> None:
        """Print frames leaf first."""
        for call in reversed(stack.calls):
            self._write(f"    {package_label(call):<16} {call.pkg_src:<24} {call.func.name}({call.args})")
        if stack.elided:
            self._write("    (...)")
