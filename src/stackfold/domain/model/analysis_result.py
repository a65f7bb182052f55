"""Analysis result aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stackfold.domain.model.dump_scan import DumpScan
from stackfold.domain.model.enums import SimilarityPolicy

if TYPE_CHECKING:
    from stackfold.domain.model.goroutine import Goroutine


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Result of analysing one dump.

    Immutable aggregate handed to reporters.

    Attributes:
        scan: Parsed goroutines and the text around them
        groups: Aggregated representatives, sorted for presentation
        policy: Similarity policy the groups were built with
    """

    scan: DumpScan
    groups: tuple[Goroutine, ...]
    policy: SimilarityPolicy

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        total = sum(g.count for g in self.groups)
        if total != self.scan.goroutine_count:
            raise ValueError(f"groups cover {total} goroutines, scan has {self.scan.goroutine_count}")

    @property
    def goroutines(self) -> tuple[Goroutine, ...]:
        """Parsed goroutines in dump order."""
        return self.scan.goroutines

    @property
    def goroutine_count(self) -> int:
        """Number of goroutines in the dump."""
        return self.scan.goroutine_count

    @property
    def group_count(self) -> int:
        """Number of groups."""
        return len(self.groups)

    @property
    def truncated(self) -> bool:
        """Check if the dump ended mid-block."""
        return self.scan.truncated is not None

    @classmethod
    def empty(cls, policy: SimilarityPolicy = SimilarityPolicy.EXACT_LINES) -> AnalysisResult:
        """Create result of a dump without goroutines."""
        return cls(scan=DumpScan.empty(), groups=(), policy=policy)
