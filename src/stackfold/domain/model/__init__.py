"""Domain model entities."""

# Enumerations
from stackfold.domain.model.enums import Location, SimilarityPolicy

# Value objects
from stackfold.domain.model.arg import Arg, Args
from stackfold.domain.model.call import Call
from stackfold.domain.model.func import Func
from stackfold.domain.model.resolved_path import ResolvedPath
from stackfold.domain.model.signature import Signature
from stackfold.domain.model.stack import Stack

# Entities
from stackfold.domain.model.goroutine import Goroutine

# Aggregates
from stackfold.domain.model.analysis_result import AnalysisResult
from stackfold.domain.model.dump_scan import DumpScan, UnclassifiedLine

# Configuration
from stackfold.domain.model.configuration import ParseOptions, RootConfig

__all__ = [
    # Enums
    "Location",
    "SimilarityPolicy",
    # Value objects
    "Func",
    "Arg",
    "Args",
    "Call",
    "ResolvedPath",
    "Stack",
    "Signature",
    # Entities
    "Goroutine",
    # Aggregates
    "AnalysisResult",
    "DumpScan",
    "UnclassifiedLine",
    # Configuration
    "RootConfig",
    "ParseOptions",
]
