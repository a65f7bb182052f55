"""Goroutine entity."""

from __future__ import annotations

from dataclasses import dataclass

from stackfold.domain.model.signature import Signature


@dataclass(frozen=True, slots=True)
class Goroutine:
    """One goroutine from a dump, or the representative of a group.

    Parsing creates one Goroutine per dump entry with count 1.
    Aggregation creates representatives with count >= 1; the originals
    are never modified.

    Attributes:
        id: Dump-assigned id, not stable across runs
        signature: State and stacks
        count: Number of original goroutines this entry stands for
        ids: Ids of every collapsed goroutine, in order of appearance.
            Empty means (id,)
        first: Contains the first goroutine printed (usually the crasher)
        created_by_id: Id of the creating goroutine, if the runtime printed it
    """

    id: int
    signature: Signature
    count: int = 1
    ids: tuple[int, ...] = ()
    first: bool = False
    created_by_id: int | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.signature is None:
            raise TypeError("signature must not be None")
        if self.id < 0:
            raise ValueError(f"id must be >= 0, got {self.id}")
        if self.count < 1:
            raise ValueError(f"count must be >= 1, got {self.count}")
        if self.ids and len(self.ids) != self.count:
            raise ValueError(f"ids has {len(self.ids)} entries but count is {self.count}")
        if self.ids and self.ids[0] != self.id:
            raise ValueError(f"ids must start with id {self.id}, got {self.ids[0]}")

    @property
    def all_ids(self) -> tuple[int, ...]:
        """Ids of every goroutine represented, at least (id,)."""
        return self.ids or (self.id,)

    def __str__(self) -> str:
        """Format as "N: state" with the count when grouped."""
        prefix = f"{self.count}: " if self.count > 1 else f"goroutine {self.id}: "
        return f"{prefix}{self.signature.state}"
