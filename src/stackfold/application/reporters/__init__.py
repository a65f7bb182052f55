"""Reporters for analysis results.

PlainTextReporter and JSONReporter use stdlib only,
ConsoleReporter renders with rich.
Users can implement custom reporters on top of BaseReporter.
"""

from stackfold.application.reporters._base import BaseReporter
from stackfold.application.reporters.console import ConsoleConfig, ConsoleReporter
from stackfold.application.reporters.json_reporter import JSONReporter
from stackfold.application.reporters.plain_text import PlainTextReporter

__all__ = [
    "BaseReporter",
    "ConsoleConfig",
    "ConsoleReporter",
    "JSONReporter",
    "PlainTextReporter",
]
