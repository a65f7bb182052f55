"""Application layer for dump analysis.

Components:
- discovery: Source root discovery (GOROOT, GOPATH, go.mod)
- grouping: Signature comparison and aggregation
- reporters: Output formatting (PlainText, JSON, Console)
- services: Dump parsers and the main facade (StackAnalyzer)
"""

from stackfold.application.discovery import (
    discover_roots,
    find_go_mod,
    guess_roots,
    read_module_path,
)
from stackfold.application.grouping import aggregate, equal, less, similar
from stackfold.application.reporters import (
    BaseReporter,
    ConsoleConfig,
    ConsoleReporter,
    JSONReporter,
    PlainTextReporter,
)
from stackfold.application.services import StackAnalyzer, parse_dump, scan_dump

__all__ = [
    # Discovery
    "discover_roots",
    "find_go_mod",
    "guess_roots",
    "read_module_path",
    # Grouping
    "aggregate",
    "equal",
    "less",
    "similar",
    # Reporters
    "BaseReporter",
    "ConsoleConfig",
    "ConsoleReporter",
    "JSONReporter",
    "PlainTextReporter",
    # Services
    "StackAnalyzer",
    "parse_dump",
    "scan_dump",
]
