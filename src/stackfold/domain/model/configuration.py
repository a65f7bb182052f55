"""Engine configuration.

RootConfig tells the path resolver where the build machine's roots were
and where the same trees live on this host. ParseOptions bounds the dump
parser. Both are immutable and passed explicitly to every call: the
engine keeps no process-wide state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Go runtime prints at most this many argument words before "...".
DEFAULT_MAX_INLINE_ARGS = 10
# Same as the original line scanner's token size.
DEFAULT_MAX_LINE_LENGTH = 64 * 1024
DEFAULT_MAX_STACK_DEPTH = 1024


def normalize_root(path: str) -> str:
    """Convert back-slashes to "/" for prefix matching."""
    return path.replace("\\", "/")


def _check_root(kind: str, path: str) -> None:
    if not path:
        raise ValueError(f"{kind} must not be empty")
    if normalize_root(path).endswith("/") and normalize_root(path) != "/":
        raise ValueError(f"{kind} must not end with a path separator, got {path!r}")


@dataclass(frozen=True, slots=True)
class RootConfig:
    """Known source roots, remote (as in the dump) and local (this host).

    None of the fields are required: an empty RootConfig resolves every
    frame to Location.UNKNOWN.

    Attributes:
        goroot_remote: GOROOT as printed in the dump
        goroot_local: GOROOT on this host, defaults to goroot_remote
        gopath_pairs: (remote GOPATH, local GOPATH) pairs, checked in order
        go_mod_roots: Directory containing a go.mod -> its module path
        module_cache_roots: Remote module cache dir -> local module cache dir
    """

    goroot_remote: str = ""
    goroot_local: str = ""
    gopath_pairs: tuple[tuple[str, str], ...] = ()
    go_mod_roots: Mapping[str, str] = field(default_factory=dict)
    module_cache_roots: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.goroot_remote:
            _check_root("goroot_remote", self.goroot_remote)
        if self.goroot_local:
            if not self.goroot_remote:
                raise ValueError("goroot_local requires goroot_remote")
            _check_root("goroot_local", self.goroot_local)
        for pair in self.gopath_pairs:
            if len(pair) != 2:
                raise ValueError(f"gopath_pairs entries must be (remote, local), got {pair!r}")
            _check_root("gopath remote", pair[0])
            _check_root("gopath local", pair[1])
        for root, module in self.go_mod_roots.items():
            _check_root("go_mod_roots key", root)
            if not module:
                raise ValueError(f"module path for {root!r} must not be empty")
        for remote, local in self.module_cache_roots.items():
            _check_root("module_cache_roots key", remote)
            _check_root("module_cache_roots value", local)

        object.__setattr__(self, "go_mod_roots", MappingProxyType(dict(self.go_mod_roots)))
        object.__setattr__(self, "module_cache_roots", MappingProxyType(dict(self.module_cache_roots)))

    @property
    def local_goroot(self) -> str:
        """GOROOT on this host."""
        return self.goroot_local or self.goroot_remote

    def all_module_cache_roots(self) -> tuple[tuple[str, str], ...]:
        """Module cache roots in priority order.

        Explicit roots first, then GOPATH/pkg/mod of every GOPATH pair.
        """
        roots = list(self.module_cache_roots.items())
        roots.extend((f"{remote}/pkg/mod", f"{local}/pkg/mod") for remote, local in self.gopath_pairs)
        return tuple(roots)

    def sorted_go_mod_roots(self) -> tuple[tuple[str, str], ...]:
        """Go module roots, longest first so nested modules win."""
        return tuple(sorted(self.go_mod_roots.items(), key=lambda kv: (-len(kv[0]), kv[0])))

    def has_roots(self) -> bool:
        """Check if any root is configured."""
        return bool(self.goroot_remote or self.gopath_pairs or self.go_mod_roots or self.module_cache_roots)


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Limits applied by the dump parser.

    Attributes:
        max_inline_args: Argument words printed before the runtime elides.
            An elided list must hold exactly this many words.
        max_line_length: Longer lines are never matched against the
            grammar; they are reported as unclassified.
        max_stack_depth: Frames accepted per stack.
    """

    max_inline_args: int = DEFAULT_MAX_INLINE_ARGS
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    max_stack_depth: int = DEFAULT_MAX_STACK_DEPTH

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.max_inline_args < 1:
            raise ValueError(f"max_inline_args must be >= 1, got {self.max_inline_args}")
        if self.max_line_length < 1:
            raise ValueError(f"max_line_length must be >= 1, got {self.max_line_length}")
        if self.max_stack_depth < 1:
            raise ValueError(f"max_stack_depth must be >= 1, got {self.max_stack_depth}")
