"""Mangled function symbol decoder.

The runtime prints symbols like:
    gopkg.in/yaml%2ev2.(*Struct).Method
    main.func·001
    reflect.Value.assignTo
    main.G[...]
    foo                                  (C code)

Only the import path is escaped: an encoded dot (%2e) inside a path
segment must not be taken for the package/function separator, so the
separator is located in the raw text and escapes are decoded afterwards.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

from stackfold.domain.exceptions import SymbolDecodeError
from stackfold.domain.model.func import MAIN_PACKAGE, Func

logger = logging.getLogger(__name__)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_OPENERS = {"(": ")", "[": "]"}
_CLOSERS = {")", "]"}


def parse_symbol(raw: str) -> Func:
    """Decode a mangled symbol into a Func.

    Args:
        raw: Symbol as printed in the dump.

    Returns:
        Decoded function identity.

    Raises:
        SymbolDecodeError: Malformed escape, invalid UTF-8 or unbalanced
            parenthesis/brackets.
    """
    if not raw:
        raise SymbolDecodeError(raw, "empty symbol")

    dots, last_slash = _scan(raw)

    if not dots:
        # C code in old runtimes: no package at all.
        name = _decode(raw, raw)
        return Func(complete=name, import_path="", dir_name="", name=name, is_exported=_is_exported(name))

    after_slash = [d for d in dots if d > last_slash]
    if not after_slash:
        raise SymbolDecodeError(raw, "expected a dot after the last path separator")

    end_pkg = after_slash[0]
    import_path = _decode(raw, raw[:end_pkg])
    name = _decode(raw, raw[end_pkg + 1 :])
    if not import_path:
        raise SymbolDecodeError(raw, "empty import path")
    if not name:
        raise SymbolDecodeError(raw, "empty function name")

    return Func(
        complete=f"{import_path}.{name}",
        import_path=import_path,
        dir_name=import_path.rsplit("/", 1)[-1],
        name=name,
        is_exported=_is_exported(_unqualified(name)),
        is_pkg_main=import_path == MAIN_PACKAGE,
    )


def parse_symbol_lenient(raw: str) -> Func:
    """Decode a symbol, falling back to an opaque Func on failure."""
    try:
        return parse_symbol(raw)
    except SymbolDecodeError as e:
        logger.debug("Using raw symbol: %s", e)
        return Func.opaque(raw)


def _scan(raw: str) -> tuple[list[int], int]:
    """Find dots and the last slash outside (...) and [...] groups."""
    dots: list[int] = []
    last_slash = -1
    expected: list[str] = []

    for i, ch in enumerate(raw):
        if ch in _OPENERS:
            expected.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not expected or expected.pop() != ch:
                raise SymbolDecodeError(raw, f"unbalanced {ch!r} at offset {i}")
        elif expected:
            continue
        elif ch == ".":
            dots.append(i)
        elif ch == "/":
            last_slash = i

    if expected:
        raise SymbolDecodeError(raw, f"missing {expected[-1]!r}")
    return dots, last_slash


def _decode(raw: str, part: str) -> str:
    """Decode %XX escapes in part. raw is used for error reporting."""
    if "%" not in part:
        return part
    if bad := _BAD_ESCAPE.search(part):
        raise SymbolDecodeError(raw, f"malformed escape {part[bad.start() : bad.start() + 3]!r}")
    try:
        return unquote(part, errors="strict")
    except UnicodeDecodeError as e:
        raise SymbolDecodeError(raw, f"invalid UTF-8 after decoding: {e.reason}") from e


def _unqualified(name: str) -> str:
    """Strip a leading "(*Receiver)." or "Receiver." qualifier."""
    depth = 0
    for i, ch in enumerate(name):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "." and depth == 0:
            return name[i + 1 :]
    return name


def _is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()
