"""Main facade for dump analysis.

StackAnalyzer runs the whole pipeline: parse, resolve, aggregate, report.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Self

from stackfold.application.discovery import discover_roots
from stackfold.application.grouping import aggregate
from stackfold.application.services.parser import parse_dump, scan_dump
from stackfold.domain.model.analysis_result import AnalysisResult
from stackfold.domain.model.configuration import ParseOptions, RootConfig
from stackfold.domain.model.dump_scan import DumpScan
from stackfold.domain.model.enums import SimilarityPolicy

if TYPE_CHECKING:
    from pathlib import Path

    from stackfold.application.reporters import BaseReporter

logger = logging.getLogger(__name__)


class StackAnalyzer:
    """Main facade for goroutine dump analysis.

    Composition-based: accepts roots, policy, limits and reporter.
    Holds no state between analyze() calls.

    Factory methods:
    - from_environment(): Roots discovered from GOROOT/GOPATH/go.mod

    Example:
        analyzer = StackAnalyzer(policy=SimilarityPolicy.ANY_VALUE)
        result = analyzer.analyze(Path("crash.txt").read_text())
        for group in result.groups:
            print(group.count, group.signature.state)
    """

    def __init__(
        self,
        config: RootConfig | None = None,
        policy: SimilarityPolicy = SimilarityPolicy.ANY_POINTER,
        options: ParseOptions | None = None,
        *,
        strict: bool = False,
        reporter: BaseReporter | None = None,
    ) -> None:
        """Initialize analyzer with dependencies.

        Args:
            config: Roots for location resolution. None = leave unresolved
            policy: Similarity policy used for grouping
            options: Parser limits. None = defaults
            strict: Raise on malformed dumps instead of collecting junk
            reporter: Optional reporter, called after each analysis
        """
        self._config = config
        self._policy = policy
        self._options = options or ParseOptions()
        self._strict = strict
        self._reporter = reporter

    @classmethod
    def from_environment(
        cls,
        start: Path,
        policy: SimilarityPolicy = SimilarityPolicy.ANY_POINTER,
        *,
        reporter: BaseReporter | None = None,
    ) -> Self:
        """Create analyzer with roots discovered on this host.

        Args:
            start: Directory to search the nearest go.mod from
            policy: Similarity policy used for grouping
            reporter: Optional reporter

        Returns:
            Configured StackAnalyzer
        """
        return cls(discover_roots(start), policy, reporter=reporter)

    @property
    def policy(self) -> SimilarityPolicy:
        """Similarity policy used for grouping."""
        return self._policy

    def analyze(self, text: str) -> AnalysisResult:
        """Parse and aggregate a dump.

        Args:
            text: Dump text, possibly surrounded by other output

        Returns:
            AnalysisResult with parsed goroutines and sorted groups

        Raises:
            FrameSyntaxError: In strict mode, malformed line inside a block
            TruncatedInputError: In strict mode, input ended mid-block
        """
        if self._strict:
            scan = DumpScan(goroutines=parse_dump(text, self._config, options=self._options))
        else:
            scan = scan_dump(text, self._config, options=self._options)

        result = AnalysisResult(scan=scan, groups=aggregate(scan.goroutines, self._policy), policy=self._policy)

        if self._reporter is not None:
            self._reporter.report(result)
        return result

    def analyze_file(self, path: Path) -> AnalysisResult:
        """Read a dump from path and analyze it.

        Undecodable bytes are replaced, dumps are mostly ASCII.

        Raises:
            OSError: If the file cannot be read
        """
        logger.debug("Reading dump from %s", path)
        return self.analyze(path.read_text(encoding="utf-8", errors="replace"))
