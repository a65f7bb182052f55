"""Base reporter class for output formatting.

Concrete reporters inherit from this and write to a text stream.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from stackfold.domain.model.analysis_result import AnalysisResult
    from stackfold.domain.model.call import Call
    from stackfold.domain.model.goroutine import Goroutine


class BaseReporter(ABC):
    """Base class for reporters.

    Concrete reporters must implement the report() method.
    stackfold provides PlainTextReporter, JSONReporter and ConsoleReporter.

    Example:
        class CountReporter(BaseReporter):
            def report(self, result: AnalysisResult) -> None:
                self._output.write(f"{result.group_count} groups\\n")
    """

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize reporter.

        Args:
            output: Output stream (default: sys.stdout)
        """
        self._output = output if output is not None else sys.stdout

    @abstractmethod
    def report(self, result: AnalysisResult) -> None:
        """Report analysis results.

        Implementation decides the format.

        Args:
            result: Parsed and aggregated dump
        """


def group_title(goroutine: Goroutine) -> str:
    """Format "count: state [sleep] [locked to thread]" for a group."""
    signature = goroutine.signature
    parts = [f"{goroutine.count}: {signature.state}"]
    if signature.has_sleep:
        parts.append(f"[{signature.sleep_string}]")
    if signature.locked_to_thread:
        parts.append("[locked to thread]")
    return " ".join(parts)


def package_label(call: Call) -> str:
    """Short package name of a frame, "" for C frames."""
    return call.func.dir_name or call.func.import_path
