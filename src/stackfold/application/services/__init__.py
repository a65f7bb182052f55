"""Application services for dump analysis.

StackAnalyzer is the main facade; parse_dump and scan_dump are the
strict and lenient dump parsers.
"""

from stackfold.application.services.analyzer import StackAnalyzer
from stackfold.application.services.parser import parse_dump, scan_dump

__all__ = [
    "StackAnalyzer",
    "parse_dump",
    "scan_dump",
]
