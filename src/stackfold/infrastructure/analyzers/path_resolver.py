"""Source path resolver.

Classifies a frame's source file by matching it against the configured
roots and rewrites the remote path into one that exists on this host.

Roots are tried in a fixed priority order, first match wins:
    1. GOROOT            -> STDLIB   (GOROOT/src/<import>/file)
    2. module caches     -> GO_PKG   (<cache>/<import>@<version>/file)
    3. go.mod roots      -> GO_MOD   (<root>/<rel dir>/file)
    4. GOPATH            -> GOPATH   (GOPATH/src/<import>/file)
A "vendor" directory in the import-relative part turns the match into
VENDOR. Nothing matching leaves UNKNOWN.

Pure functions: no I/O, no caching, everything comes from RootConfig.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from stackfold.domain.model.configuration import normalize_root
from stackfold.domain.model.enums import Location
from stackfold.domain.model.resolved_path import ResolvedPath, strip_version

if TYPE_CHECKING:
    from stackfold.domain.model.call import Call
    from stackfold.domain.model.configuration import RootConfig
    from stackfold.domain.model.func import Func
    from stackfold.domain.model.stack import Stack

# "go test" injects this file; it counts as standard library.
TEST_MAIN_SRC = "_test/_testmain.go"

_VENDOR = "vendor"


def resolve(func: Func, raw_file: str, config: RootConfig) -> ResolvedPath:
    """Classify raw_file and compute its local and relative forms.

    Args:
        func: Function the frame calls; its import path is kept for display.
        raw_file: Source path as printed in the dump.
        config: Known roots.

    Returns:
        ResolvedPath. Deterministic for identical inputs.
    """
    path = normalize_root(raw_file)
    declared = func.import_path
    if not path:
        return ResolvedPath(location=Location.UNKNOWN, declared_import_path=declared)

    if config.goroot_remote:
        rel = _strip_prefix(path, f"{_root(config.goroot_remote)}/src/")
        if rel is not None:
            local = f"{_root(config.local_goroot)}/src/{rel}"
            resolved = _build(Location.STDLIB, _dir(rel), rel, local, declared, is_stdlib=True)
            if resolved is not None:
                return resolved

    for remote, local_root in config.all_module_cache_roots():
        rel = _strip_prefix(path, f"{_root(remote)}/")
        if rel is not None:
            resolved = _build(Location.GO_PKG, _dir(rel), rel, f"{_root(local_root)}/{rel}", declared)
            if resolved is not None:
                return resolved

    for root, module in config.sorted_go_mod_roots():
        rel = _strip_prefix(path, f"{_root(root)}/")
        if rel is not None:
            rel_dir = _dir(rel)
            import_path = f"{module}/{rel_dir}" if rel_dir else module
            resolved = _build(Location.GO_MOD, import_path, rel, path, declared, vendor_part=rel_dir)
            if resolved is not None:
                return resolved

    for remote, local_root in config.gopath_pairs:
        rel = _strip_prefix(path, f"{_root(remote)}/src/")
        if rel is not None:
            resolved = _build(Location.GOPATH, _dir(rel), rel, f"{_root(local_root)}/src/{rel}", declared)
            if resolved is not None:
                return resolved

    return ResolvedPath(
        location=Location.UNKNOWN,
        declared_import_path=declared,
        is_stdlib=_is_test_main(path),
    )


def resolve_call(call: Call, config: RootConfig) -> Call:
    """Return a copy of call with its location fields filled."""
    return call.with_resolution(resolve(call.func, call.remote_src_path, config))


def resolve_stack(stack: Stack, config: RootConfig) -> Stack:
    """Return a copy of stack with every call resolved."""
    return replace(stack, calls=tuple(resolve_call(c, config) for c in stack.calls))


def _build(
    location: Location,
    import_path: str,
    rel: str,
    local: str,
    declared: str,
    *,
    is_stdlib: bool = False,
    vendor_part: str | None = None,
) -> ResolvedPath | None:
    """Assemble a ResolvedPath, applying the vendor override.

    vendor_part is the import-relative directory searched for "vendor";
    it defaults to import_path. Returns None when no import path can be
    derived, so the caller keeps looking.
    """
    searched = import_path if vendor_part is None else vendor_part
    vendored = _after_vendor(searched)
    if vendored:
        location = Location.VENDOR
        import_path = vendored
    if not import_path:
        return None
    last = import_path.rsplit("/", 1)[-1]
    return ResolvedPath(
        location=location,
        import_path=import_path,
        dir_name=strip_version(last),
        local_src_path=local,
        rel_src_path=rel,
        declared_import_path=declared,
        is_stdlib=is_stdlib,
    )


def _after_vendor(rel_dir: str) -> str:
    """Import path following the last "vendor" segment, "" if none."""
    parts = rel_dir.split("/")
    for i in range(len(parts) - 1, -1, -1):
        if parts[i] == _VENDOR:
            return "/".join(parts[i + 1 :])
    return ""


def _strip_prefix(path: str, prefix: str) -> str | None:
    if path.startswith(prefix) and len(path) > len(prefix):
        return path[len(prefix) :]
    return None


def _root(path: str) -> str:
    return normalize_root(path).rstrip("/")


def _dir(rel: str) -> str:
    return rel.rsplit("/", 1)[0] if "/" in rel else ""


def _is_test_main(path: str) -> bool:
    return path == TEST_MAIN_SRC or path.endswith(f"/{TEST_MAIN_SRC}")
