"""Stack frame value object."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from stackfold.domain.model.arg import Args
from stackfold.domain.model.enums import Location, SimilarityPolicy
from stackfold.domain.model.func import Func
from stackfold.domain.model.resolved_path import ResolvedPath

# Source path recorded for a goroutine whose stack the runtime could not print.
UNAVAILABLE_SRC = "<unavailable>"


def _split_path(path: str) -> list[str]:
    """Split on both separators so Windows paths behave."""
    return path.replace("\\", "/").split("/")


@dataclass(frozen=True, slots=True)
class Call:
    """One stack frame.

    Created once per parsed frame. The location fields are filled by a
    second pass (with_resolution) that returns a new Call.

    Attributes:
        func: Called function
        args: Call arguments as printed
        remote_src_path: Source path as seen in the dump
        line: Line number (0 when the runtime printed "??:0")
        local_src_path: Source path on this host, "" if unresolved
        rel_src_path: Path relative to the matched root, "" if unresolved
        import_path: File-derived import path, "" if unresolved
        location: Origin category of the source file
        is_stdlib: Frame belongs to the standard library
    """

    func: Func
    args: Args = field(default_factory=Args)
    remote_src_path: str = ""
    line: int = 0
    local_src_path: str = ""
    rel_src_path: str = ""
    import_path: str = ""
    location: Location = Location.UNKNOWN
    is_stdlib: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.func is None:
            raise TypeError("func must not be None")
        if self.line < 0:
            raise ValueError(f"line must be >= 0, got {self.line}")
        if self.location is not Location.UNKNOWN and not self.import_path:
            raise ValueError(f"import_path must not be empty for location {self.location}")

    @property
    def src_name(self) -> str:
        """Base file name of the source file."""
        return _split_path(self.remote_src_path)[-1]

    @property
    def dir_src(self) -> str:
        """Containing directory plus file name (e.g., "yaml.v2/yaml.go")."""
        parts = _split_path(self.remote_src_path)
        if len(parts) < 2:
            return parts[-1]
        return f"{parts[-2]}/{parts[-1]}"

    @property
    def is_pkg_main(self) -> bool:
        """Check if the called function is in package main."""
        return self.func.is_pkg_main

    @property
    def full_src_line(self) -> str:
        """Format as remote_src_path:line."""
        return f"{self.remote_src_path}:{self.line}"

    @property
    def src_line(self) -> str:
        """Format as src_name:line."""
        return f"{self.src_name}:{self.line}"

    @property
    def pkg_src(self) -> str:
        """Format as dir_src:line, the short form used in reports."""
        return f"{self.dir_src}:{self.line}"

    def with_resolution(self, resolved: ResolvedPath) -> Call:
        """Return a copy carrying the resolver's result."""
        return replace(
            self,
            local_src_path=resolved.local_src_path,
            rel_src_path=resolved.rel_src_path,
            import_path=resolved.import_path,
            location=resolved.location,
            is_stdlib=resolved.is_stdlib,
        )

    def equal(self, other: Call) -> bool:
        """Check if both frames are identical, resolved fields included."""
        return self == other

    def similar(self, other: Call, policy: SimilarityPolicy) -> bool:
        """Check if both frames are the same code location, args per policy."""
        return (
            self.line == other.line
            and self.func.complete == other.func.complete
            and self.remote_src_path == other.remote_src_path
            and self.args.similar(other.args, policy)
        )

    def merge(self, other: Call) -> Call:
        """Return self with args merged with a similar other's."""
        return replace(self, args=self.args.merge(other.args))

    def __str__(self) -> str:
        """Format as func(args) path:line."""
        return f"{self.func}({self.args}) {self.full_src_line}"
