"""Analyzers for goroutine dump text: symbols, source paths and frame lines."""

from stackfold.infrastructure.analyzers.frame_parser import (
    GoroutineHeader,
    LineKind,
    check_elision,
    classify_line,
    is_elided_marker,
    is_unavailable_marker,
    parse_args,
    parse_call_line,
    parse_created_by,
    parse_file_line,
    parse_func_line,
    parse_header,
)
from stackfold.infrastructure.analyzers.path_resolver import resolve, resolve_call, resolve_stack
from stackfold.infrastructure.analyzers.symbol_parser import parse_symbol, parse_symbol_lenient

__all__ = [
    # Symbols
    "parse_symbol",
    "parse_symbol_lenient",
    # Paths
    "resolve",
    "resolve_call",
    "resolve_stack",
    # Frames
    "GoroutineHeader",
    "LineKind",
    "check_elision",
    "classify_line",
    "is_elided_marker",
    "is_unavailable_marker",
    "parse_args",
    "parse_call_line",
    "parse_created_by",
    "parse_file_line",
    "parse_func_line",
    "parse_header",
]
