"""Dump scan result value objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stackfold.domain.exceptions import TruncatedInputError
    from stackfold.domain.model.goroutine import Goroutine


@dataclass(frozen=True, slots=True)
class UnclassifiedLine:
    """Line that is not part of the dump grammar.

    Attributes:
        line_no: 1-based line number
        text: Line without its terminator
    """

    line_no: int
    text: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.line_no < 1:
            raise ValueError(f"line_no must be >= 1, got {self.line_no}")


@dataclass(frozen=True, slots=True)
class DumpScan:
    """Result of a lenient scan.

    Attributes:
        goroutines: Parsed goroutines in dump order, the first one flagged
        unclassified: Lines between or inside blocks that matched nothing
        prefix: Verbatim text before the first goroutine header
        suffix: Verbatim text after the last block
        truncated: Set when the input ended mid-block; the partial
            goroutine is the last entry of goroutines
    """

    goroutines: tuple[Goroutine, ...]
    unclassified: tuple[UnclassifiedLine, ...] = ()
    prefix: str = ""
    suffix: str = ""
    truncated: TruncatedInputError | None = None

    @property
    def goroutine_count(self) -> int:
        """Number of goroutines parsed."""
        return len(self.goroutines)

    @classmethod
    def empty(cls) -> DumpScan:
        """Create a scan of a dump without goroutines."""
        return cls(goroutines=())
