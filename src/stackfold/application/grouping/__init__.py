"""Signature comparison and goroutine aggregation."""

from stackfold.application.grouping.bucketizer import aggregate, equal, less, similar

__all__ = [
    "aggregate",
    "equal",
    "less",
    "similar",
]
