"""Goroutine aggregation.

Folds a parsed dump into representatives, one per group of similar
goroutines, then sorts them for presentation.

Algorithm:
1. Scan goroutines in dump order
2. Compare each against the first member of every existing group, in
   creation order; the first similar one absorbs it (count, ids, first,
   sleep, locked) and merges its arguments into the representative
3. No match: the goroutine becomes a new representative
4. Sort representatives by Signature.sort_key

Representatives are indexed by (frame count, leaf function, state).
similar() requires all three to be equal, so only the matching bucket is
scanned and first-match order is unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stackfold.domain.model.goroutine import Goroutine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stackfold.domain.model.enums import SimilarityPolicy
    from stackfold.domain.model.signature import Signature

logger = logging.getLogger(__name__)

_BucketKey = tuple[int, str, str]


def equal(a: Signature, b: Signature) -> bool:
    """Check if two signatures are identical in every field."""
    return a.equal(b)


def similar(a: Signature, b: Signature, policy: SimilarityPolicy) -> bool:
    """Check if two signatures describe the same code path under policy."""
    return a.similar(b, policy)


def less(a: Signature, b: Signature) -> bool:
    """Strict presentation order of two signatures."""
    return a.less(b)


def aggregate(goroutines: Iterable[Goroutine], policy: SimilarityPolicy) -> tuple[Goroutine, ...]:
    """Group similar goroutines and sort the groups.

    Args:
        goroutines: Parsed goroutines, in dump order.
        policy: Tolerance used to decide that two goroutines belong together.

    Returns:
        Representatives sorted by less(). The counts add up to the number
        of input goroutines; the input is not modified.
    """
    groups: list[_Group] = []
    buckets: dict[_BucketKey, list[_Group]] = {}
    total = 0

    for goroutine in goroutines:
        total += goroutine.count
        bucket = buckets.setdefault(_bucket_key(goroutine.signature), [])
        for group in bucket:
            if group.head.signature.similar(goroutine.signature, policy):
                group.absorb(goroutine)
                break
        else:
            group = _Group.start(goroutine)
            bucket.append(group)
            groups.append(group)
            logger.debug("New group for goroutine %d (%d buckets)", goroutine.id, len(buckets))

    result = sorted((g.freeze() for g in groups), key=lambda g: g.signature.sort_key())
    logger.info("Aggregated %d goroutines into %d groups (policy %s)", total, len(result), policy.name)
    return tuple(result)


def _bucket_key(signature: Signature) -> _BucketKey:
    leaf = signature.stack.leaf
    return len(signature.stack), leaf.func.complete if leaf is not None else "", signature.state


@dataclass(slots=True)
class _Group:
    """Mutable accumulator behind one representative."""

    head: Goroutine
    signature: Signature
    count: int = 0
    ids: list[int] = field(default_factory=list)
    first: bool = False

    @classmethod
    def start(cls, goroutine: Goroutine) -> _Group:
        return cls(
            head=goroutine,
            signature=goroutine.signature,
            count=goroutine.count,
            ids=list(goroutine.all_ids),
            first=goroutine.first,
        )

    def absorb(self, goroutine: Goroutine) -> None:
        self.signature = self.signature.merge(goroutine.signature)
        self.count += goroutine.count
        self.ids.extend(goroutine.all_ids)
        self.first = self.first or goroutine.first

    def freeze(self) -> Goroutine:
        return Goroutine(
            id=self.head.id,
            signature=self.signature,
            count=self.count,
            ids=tuple(self.ids) if len(self.ids) == self.count else (),
            first=self.first,
            created_by_id=self.head.created_by_id,
        )
