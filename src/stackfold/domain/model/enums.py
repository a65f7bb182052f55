"""Domain enumerations."""

from enum import Enum, auto


class Location(Enum):
    """Origin category of a call's source file.

    Determined by matching the frame's file path against the roots
    supplied in RootConfig. Closed set.
    """

    UNKNOWN = auto()  # no configured root matched
    STDLIB = auto()  # GOROOT/src/...
    GOPATH = auto()  # GOPATH/src/<import>/file
    GO_PKG = auto()  # module cache: pkg/mod/<import>@<version>/file
    GO_MOD = auto()  # local checkout of a project with a go.mod
    VENDOR = auto()  # vendored copy inside another module or workspace

    def __str__(self) -> str:
        """Format as the display name used in reports."""
        return _LOCATION_NAMES[self]


_LOCATION_NAMES = {
    Location.UNKNOWN: "Unknown",
    Location.STDLIB: "Stdlib",
    Location.GOPATH: "GOPATH",
    Location.GO_PKG: "GoPkg",
    Location.GO_MOD: "GoMod",
    Location.VENDOR: "Vendor",
}


class SimilarityPolicy(Enum):
    """How much two signatures may differ and still be grouped together.

    Ordered from strictest to most permissive:
    - EXACT_FLAGS: pointer-shaped argument values may differ, everything
      else including the locked-to-thread flag must match
    - EXACT_LINES: argument contents ignored (count and elision kept)
    - ANY_POINTER: same argument treatment as EXACT_LINES
    - ANY_VALUE: argument contents ignored, sleep durations may differ
      as long as both signatures report one
    """

    EXACT_FLAGS = auto()
    EXACT_LINES = auto()
    ANY_POINTER = auto()
    ANY_VALUE = auto()
