"""Function identity value object."""

from __future__ import annotations

from dataclasses import dataclass

# Import path of the program entry package as printed by the runtime.
MAIN_PACKAGE = "main"


@dataclass(frozen=True, slots=True)
class Func:
    """Identity of a called function, decoded from a mangled symbol.

    Immutable value object with FAIL-FIRST validation.
    Built by the symbol parser; never mutated afterwards.

    Attributes:
        complete: Decoded full symbol (e.g., "gopkg.in/yaml.v2.(*T).M")
        import_path: Package import path, "" for symbols without a dot
        dir_name: Last segment of import_path, used for display
        name: Function or receiver-qualified method name
        is_exported: First rune of the unqualified name is upper-case
        is_pkg_main: import_path is exactly the entry package
    """

    complete: str
    import_path: str
    dir_name: str
    name: str
    is_exported: bool = False
    is_pkg_main: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.complete:
            raise ValueError("complete must not be empty")
        if not self.name:
            raise ValueError("name must not be empty")
        if self.is_pkg_main and self.import_path != MAIN_PACKAGE:
            raise ValueError(f"is_pkg_main requires import_path {MAIN_PACKAGE!r}, got {self.import_path!r}")

    @classmethod
    def opaque(cls, raw: str) -> Func:
        """Build a Func that treats raw as an undecodable name.

        Used as the fallback when a symbol cannot be demangled.
        """
        return cls(complete=raw, import_path="", dir_name="", name=raw)

    def __str__(self) -> str:
        """Format as the complete symbol."""
        return self.complete
