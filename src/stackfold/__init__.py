"""stackfold - goroutine dump parsing, resolution and grouping."""

__version__ = "0.1.0"

from stackfold.application.grouping import aggregate
from stackfold.application.services import StackAnalyzer, parse_dump, scan_dump
from stackfold.domain.model import RootConfig, SimilarityPolicy

__all__ = [
    "RootConfig",
    "SimilarityPolicy",
    "StackAnalyzer",
    "__version__",
    "aggregate",
    "parse_dump",
    "scan_dump",
]
