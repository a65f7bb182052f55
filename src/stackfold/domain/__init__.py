"""stackfold domain layer.

Pure domain logic with no external dependencies.
Only imports: typing, dataclasses, enum, types, collections.abc
"""

from stackfold.domain.exceptions import (
    FrameSyntaxError,
    ParseError,
    StackfoldError,
    SymbolDecodeError,
    TruncatedInputError,
)
from stackfold.domain.model import (
    AnalysisResult,
    Arg,
    Args,
    Call,
    DumpScan,
    Func,
    Goroutine,
    Location,
    ParseOptions,
    ResolvedPath,
    RootConfig,
    Signature,
    SimilarityPolicy,
    Stack,
    UnclassifiedLine,
)

__all__ = [
    # Exceptions
    "StackfoldError",
    "ParseError",
    "SymbolDecodeError",
    "FrameSyntaxError",
    "TruncatedInputError",
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
