"""JSON reporter for machine-readable output.

Stdlib-only reporter for JSON output.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, TextIO

from stackfold.application.reporters._base import BaseReporter

if TYPE_CHECKING:
    from stackfold.domain.model.analysis_result import AnalysisResult
    from stackfold.domain.model.arg import Arg
    from stackfold.domain.model.call import Call
    from stackfold.domain.model.goroutine import Goroutine
    from stackfold.domain.model.stack import Stack


class JSONReporter(BaseReporter):
    """JSON reporter for machine-readable output.

    Schema matches domain structure 1:1 with a summary added.
    Stacks are listed root first, as stored.
    """

    def __init__(
        self,
        output: TextIO | None = None,
        *,
        indent: int | None = 2,
    ) -> None:
        """Initialize reporter.

        Args:
            output: Output stream (default: sys.stdout)
            indent: JSON indentation (default: 2, None for compact)
        """
        super().__init__(output)
        self._indent = indent

    def report(self, result: AnalysisResult) -> None:
        """Report analysis results as JSON.

        Args:
            result: Parsed and aggregated dump
        """
        data = self._result_to_dict(result)
        json.dump(data, self._output, indent=self._indent)
        self._output.write("\n")

    def _result_to_dict(self, result: AnalysisResult) -> dict[str, object]:
        """Convert AnalysisResult to JSON-serializable dict."""
        truncated = result.scan.truncated
        return {
            "summary": {
                "goroutine_count": result.goroutine_count,
                "group_count": result.group_count,
                "policy": result.policy.name,
                "unclassified_count": len(result.scan.unclassified),
                "truncated": str(truncated) if truncated is not None else None,
            },
            "groups": [_goroutine_to_dict(g) for g in result.groups],
            "unclassified": [{"line_no": u.line_no, "text": u.text} for u in result.scan.unclassified],
            "prefix": result.scan.prefix,
            "suffix": result.scan.suffix,
        }


def _goroutine_to_dict(goroutine: Goroutine) -> dict[str, object]:
    signature = goroutine.signature
    return {
        "id": goroutine.id,
        "ids": list(goroutine.all_ids),
        "count": goroutine.count,
        "first": goroutine.first,
        "created_by_id": goroutine.created_by_id,
        "state": signature.state,
        "sleep_min": signature.sleep_min,
        "sleep_max": signature.sleep_max,
        "locked_to_thread": signature.locked_to_thread,
        "stack": _stack_to_dict(signature.stack),
        "created_by": _stack_to_dict(signature.created_by),
    }


def _stack_to_dict(stack: Stack) -> dict[str, object]:
    return {
        "calls": [_call_to_dict(c) for c in stack.calls],
        "elided": stack.elided,
    }


def _call_to_dict(call: Call) -> dict[str, object]:
    return {
        "func": call.func.complete,
        "import_path": call.func.import_path,
        "name": call.func.name,
        "args": [_arg_to_dict(a) for a in call.args.values],
        "args_elided": call.args.elided,
        "remote_src_path": call.remote_src_path,
        "line": call.line,
        "local_src_path": call.local_src_path,
        "location": str(call.location),
        "is_stdlib": call.is_stdlib,
    }


def _arg_to_dict(arg: Arg) -> dict[str, object]:
    if arg.is_name:
        return {"name": arg.name}
    data: dict[str, object] = {"value": arg.value, "inaccurate": arg.inaccurate}
    if arg.label:
        data["label"] = arg.label
    return data
