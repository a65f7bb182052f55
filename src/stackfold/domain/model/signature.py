"""Goroutine signature value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stackfold.domain.model.enums import SimilarityPolicy
from stackfold.domain.model.stack import Stack


@dataclass(frozen=True, slots=True)
class Signature:
    """Classifiable shape of a goroutine, independent of its id.

    Immutable value object with FAIL-FIRST validation.

    Attributes:
        state: Scheduler state (e.g., "chan receive", "IO wait", "running")
        stack: Call stack, root first
        created_by: Stack of the creating goroutine, empty if unknown or main
        sleep_min: Minutes blocked, lower bound (0 when not reported)
        sleep_max: Minutes blocked, upper bound (equals sleep_min when exact)
        locked_to_thread: Goroutine was locked to its OS thread
    """

    state: str
    stack: Stack = field(default_factory=Stack)
    created_by: Stack = field(default_factory=Stack)
    sleep_min: int = 0
    sleep_max: int = 0
    locked_to_thread: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.state:
            raise ValueError("state must not be empty")
        if self.sleep_min < 0:
            raise ValueError(f"sleep_min must be >= 0, got {self.sleep_min}")
        if self.sleep_max < self.sleep_min:
            raise ValueError(f"sleep_max ({self.sleep_max}) must be >= sleep_min ({self.sleep_min})")

    @property
    def has_sleep(self) -> bool:
        """Check if the runtime reported a blocked duration."""
        return self.sleep_max > 0

    @property
    def sleep_string(self) -> str:
        """Format as "N minutes" or "N~M minutes", "" when not sleeping."""
        if not self.has_sleep:
            return ""
        if self.sleep_min != self.sleep_max:
            return f"{self.sleep_min}~{self.sleep_max} minutes"
        return f"{self.sleep_max} minutes"

    def equal(self, other: Signature) -> bool:
        """Check if both signatures are identical in every field."""
        return self == other

    def similar(self, other: Signature, policy: SimilarityPolicy) -> bool:
        """Check if both signatures describe the same code path under policy.

        Reflexive and symmetric for every policy. Not transitive under the
        relaxed policies: tolerance does not form an equivalence class.
        """
        if self.state != other.state:
            return False
        # A creator stack on one side only is never similar.
        if not self.created_by.similar(other.created_by, policy):
            return False
        if policy is SimilarityPolicy.EXACT_FLAGS and self.locked_to_thread != other.locked_to_thread:
            return False
        if not self._sleep_similar(other, policy):
            return False
        return self.stack.similar(other.stack, policy)

    def _sleep_similar(self, other: Signature, policy: SimilarityPolicy) -> bool:
        if policy is SimilarityPolicy.ANY_VALUE:
            return self.has_sleep == other.has_sleep
        return self.sleep_min == other.sleep_min and self.sleep_max == other.sleep_max

    def merge(self, other: Signature) -> Signature:
        """Widen this signature so it also covers a similar other.

        Arguments that differ between the two stacks become "*". The
        sleep range widens and the locked flag is or-ed. The creator
        stack of self is kept.
        """
        return Signature(
            state=self.state,
            stack=self.stack.merge(other.stack),
            created_by=self.created_by,
            sleep_min=min(self.sleep_min, other.sleep_min),
            sleep_max=max(self.sleep_max, other.sleep_max),
            locked_to_thread=self.locked_to_thread or other.locked_to_thread,
        )

    def sort_key(self) -> tuple[Any, ...]:
        """Key of the presentation order.

        Fewer frames first, then root-first function names, then state.
        The remaining fields only break ties so the order is total.
        """
        calls = self.stack.calls
        return (
            len(calls),
            self.stack.names(),
            self.state,
            tuple((c.remote_src_path, c.line) for c in calls),
            self.created_by.names(),
            tuple((c.remote_src_path, c.line) for c in self.created_by.calls),
            self.sleep_min,
            self.sleep_max,
            self.locked_to_thread,
            tuple(c.args.sort_key() for c in calls),
            self.stack.elided,
            self.created_by.elided,
        )

    def less(self, other: Signature) -> bool:
        """Strict order used for deterministic output."""
        return self.sort_key() < other.sort_key()
