"""Stable "#N" labels for pointer arguments shared between goroutines.

A pointer passed in several frames usually is one object: a mutex, a
channel, a connection. Giving it a short label makes the sharing visible
in reports without printing 0xc000... everywhere.

Numbering:
1. Shared pointers passed in the first goroutine, ascending value
2. All other shared pointers, ascending value

The labels depend only on the dump. Creator stacks are left alone.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from stackfold.domain.model.arg import Arg, Args
    from stackfold.domain.model.goroutine import Goroutine

logger = logging.getLogger(__name__)


def label_shared_pointers(goroutines: Sequence[Goroutine]) -> tuple[Goroutine, ...]:
    """Tag every pointer argument seen more than once with "#N".

    Args:
        goroutines: Parsed goroutines, in dump order.

    Returns:
        Same goroutines in the same order, shared pointers labeled.
    """
    seen: Counter[int] = Counter()
    primary: set[int] = set()
    for index, goroutine in enumerate(goroutines):
        for value in _pointers(goroutine):
            seen[value] += 1
            if index == 0:
                primary.add(value)

    shared = {value for value, count in seen.items() if count > 1}
    order = sorted(shared & primary) + sorted(shared - primary)
    if not order:
        return tuple(goroutines)

    labels = {value: f"#{n}" for n, value in enumerate(order, start=1)}
    logger.debug("Labeled %d shared pointers", len(labels))
    return tuple(_relabel(g, labels) for g in goroutines)


def _pointers(goroutine: Goroutine) -> Iterator[int]:
    for call in goroutine.signature.stack.calls:
        for arg in call.args.values:
            if arg.is_ptr and arg.value is not None:
                yield arg.value


def _relabel(goroutine: Goroutine, labels: dict[int, str]) -> Goroutine:
    stack = goroutine.signature.stack
    calls = tuple(replace(call, args=_label_args(call.args, labels)) for call in stack.calls)
    signature = replace(goroutine.signature, stack=replace(stack, calls=calls))
    return replace(goroutine, signature=signature)


def _label_args(args: Args, labels: dict[int, str]) -> Args:
    return replace(args, values=tuple(_label(arg, labels) for arg in args.values))


def _label(arg: Arg, labels: dict[int, str]) -> Arg:
    if arg.value is None or arg.value not in labels:
        return arg
    return arg.with_label(labels[arg.value])
