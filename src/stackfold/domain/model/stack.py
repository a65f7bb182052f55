"""Call stack value object."""

from __future__ import annotations

from dataclasses import dataclass

from stackfold.domain.model.call import Call
from stackfold.domain.model.enums import SimilarityPolicy


@dataclass(frozen=True, slots=True)
class Stack:
    """Ordered frames of one goroutine, root frame first, leaf last.

    The runtime prints the leaf first; the dump parser reverses.

    Attributes:
        calls: Frames, root first
        elided: Runtime stopped printing frames (observed cap is 100)
    """

    calls: tuple[Call, ...] = ()
    elided: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not isinstance(self.calls, tuple):
            raise TypeError(f"calls must be a tuple, got {type(self.calls).__name__}")

    def __len__(self) -> int:
        """Number of frames."""
        return len(self.calls)

    @property
    def leaf(self) -> Call | None:
        """Innermost frame, None for an empty stack."""
        return self.calls[-1] if self.calls else None

    def equal(self, other: Stack) -> bool:
        """Check if both stacks are exactly equal."""
        return self == other

    def similar(self, other: Stack, policy: SimilarityPolicy) -> bool:
        """Check if both stacks have the same shape, args per policy."""
        if len(self.calls) != len(other.calls) or self.elided != other.elided:
            return False
        return all(a.similar(b, policy) for a, b in zip(self.calls, other.calls, strict=True))

    def merge(self, other: Stack) -> Stack:
        """Merge a similar stack frame by frame.

        Both stacks must have the same length.
        """
        calls = tuple(a.merge(b) for a, b in zip(self.calls, other.calls, strict=True))
        return Stack(calls=calls, elided=self.elided)

    def names(self) -> tuple[str, ...]:
        """Complete function names, root first."""
        return tuple(c.func.complete for c in self.calls)
