"""Source root discovery.

Builds the RootConfig the path resolver needs. The engine never calls
this: callers that run on a machine with a Go toolchain use it, callers
handling dumps from elsewhere build RootConfig themselves.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from stackfold.domain.model.configuration import RootConfig, normalize_root

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

GO_MOD = "go.mod"

_MODULE_DIRECTIVE = re.compile(r'^[ \t]*module[ \t]+"?([^"\s]+)"?[ \t]*\r?$', re.MULTILINE)


def find_go_mod(start: Path) -> Path | None:
    """Find the nearest go.mod walking from start up to the filesystem root.

    Args:
        start: Directory (or file) to start from

    Returns:
        Path of the go.mod, None if there is none
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / GO_MOD
        if candidate.is_file():
            return candidate
    return None


def read_module_path(go_mod: Path) -> str | None:
    """Extract the module path declared by a go.mod.

    Args:
        go_mod: Path of the go.mod file

    Returns:
        Module path, None if the file has no module directive

    Raises:
        OSError: If the file cannot be read
    """
    match = _MODULE_DIRECTIVE.search(go_mod.read_text(encoding="utf-8", errors="replace"))
    return match.group(1) if match else None


def discover_roots(start: Path, environ: Mapping[str, str] | None = None) -> RootConfig:
    """Build a RootConfig for dumps produced on this host.

    Reads GOROOT, GOPATH (os.pathsep separated, default ~/go), GOMODCACHE
    and the go.mod nearest to start. Remote and local roots are the same.

    Args:
        start: Directory to search a go.mod from
        environ: Environment to read, defaults to os.environ

    Returns:
        RootConfig, possibly without any root
    """
    env = os.environ if environ is None else environ

    goroot = _clean(env.get("GOROOT", ""))
    if goroot:
        logger.info("Found GOROOT=%s", goroot)

    gopaths = [_clean(p) for p in env.get("GOPATH", "").split(os.pathsep) if _clean(p)]
    if not gopaths:
        home = env.get("HOME")
        gopaths = [_clean(str(Path(home) / "go" if home else Path.home() / "go"))]
    for gopath in gopaths:
        logger.info("Found GOPATH=%s", gopath)

    module_cache: dict[str, str] = {}
    mod_cache = _clean(env.get("GOMODCACHE", ""))
    if mod_cache and mod_cache != f"{gopaths[0]}/pkg/mod":
        logger.info("Found GOMODCACHE=%s", mod_cache)
        module_cache[mod_cache] = mod_cache

    go_mod_roots: dict[str, str] = {}
    go_mod = find_go_mod(start)
    if go_mod is not None:
        module = read_module_path(go_mod)
        if module:
            root = _clean(str(go_mod.parent))
            logger.info("Found go.mod module %s at %s", module, root)
            go_mod_roots[root] = module
        else:
            logger.warning("No module directive in %s", go_mod)

    return RootConfig(
        goroot_remote=goroot,
        gopath_pairs=tuple((p, p) for p in gopaths),
        go_mod_roots=go_mod_roots,
        module_cache_roots=module_cache,
    )


def guess_roots(files: Iterable[str], local: RootConfig) -> RootConfig:
    """Guess where the dump's GOROOT and GOPATHs were on the remote host.

    For each remote source file, looks for an existing local file under
    the local GOROOT, then under each local GOPATH, that has the same
    trailing path components. The leading components that had to be cut
    are taken as the remote root.

    Args:
        files: Remote source paths as printed in the dump
        local: Roots on this host; remote roots in it are ignored

    Returns:
        RootConfig mapping the guessed remote roots to the local ones.
        Module roots of local are kept as they are.
    """
    local_goroot = _clean(local.local_goroot)
    local_gopaths = [local_path for _, local_path in local.gopath_pairs]

    goroot = ""
    gopaths: dict[str, str] = {}
    paths = sorted({normalize_root(f) for f in files})
    for path in paths:
        if goroot and path.startswith(f"{goroot}/"):
            continue
        if any(path.startswith(f"{remote}/") for remote in gopaths):
            continue
        parts = path.split("/")
        if not goroot and local_goroot:
            root = _rooted_in(local_goroot, parts)
            if root:
                goroot = root
                logger.info("Found GOROOT=%s", goroot)
                continue
        for local_path in local_gopaths:
            root = _rooted_in(local_path, parts)
            if root:
                logger.info("Found GOPATH=%s", root)
                gopaths[root] = local_path
                break

    config = RootConfig(
        goroot_remote=goroot,
        goroot_local=local_goroot if goroot else "",
        gopath_pairs=tuple(gopaths.items()),
        go_mod_roots=local.go_mod_roots,
        module_cache_roots=local.module_cache_roots,
    )
    if not config.has_roots():
        logger.warning("No root found for %d source files", len(paths))
    return config


def _rooted_in(local_root: str, parts: list[str]) -> str:
    """Remote root of parts if its tail exists under local_root, else ""."""
    for i in range(1, len(parts)):
        prefix = "/".join(parts[:i])
        if not prefix.strip("/"):
            continue
        if Path(local_root, *parts[i:]).is_file():
            return prefix
    return ""


def _clean(path: str) -> str:
    path = normalize_root(path.strip())
    return path.rstrip("/") or path
