"""Resolved source location value object."""

from __future__ import annotations

from dataclasses import dataclass

from stackfold.domain.model.enums import Location


def strip_version(segment: str) -> str:
    """Drop a module cache "@version" suffix from a path segment."""
    return segment.split("@", 1)[0]


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """Where a frame's source file lives, per the configured roots.

    Produced by the path resolver. Two import paths are kept on purpose:
    import_path comes from the file path and drives categorization,
    declared_import_path is what the function symbol itself says.
    They differ when a package name does not match its directory.

    Attributes:
        location: Category of the file's origin
        import_path: File-derived import path, "@version" retained
        dir_name: Last segment of import_path without "@version"
        local_src_path: Path of the file on this host, "" if unknown
        rel_src_path: Path relative to the matched root, "" if unknown
        declared_import_path: Import path decoded from the symbol
        is_stdlib: File belongs to the standard library
    """

    location: Location
    import_path: str = ""
    dir_name: str = ""
    local_src_path: str = ""
    rel_src_path: str = ""
    declared_import_path: str = ""
    is_stdlib: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.location is not Location.UNKNOWN and not self.import_path:
            raise ValueError(f"import_path must not be empty for location {self.location}")
        if self.location is Location.UNKNOWN and self.rel_src_path:
            raise ValueError("rel_src_path requires a matched root")

    @property
    def package_mismatch(self) -> bool:
        """Declared package directory differs from the file's directory.

        Legal in Go: a package name need not match its directory.
        Always False when the location is unknown or the package is main.
        """
        if self.location is Location.UNKNOWN or not self.declared_import_path:
            return False
        declared = self.declared_import_path.rsplit("/", 1)[-1]
        if declared == "main":
            return False
        return declared != self.dir_name
