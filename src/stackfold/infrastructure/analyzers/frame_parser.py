"""Line grammar of a goroutine dump.

Recognizes each kind of line that can appear in a dump block:

    goroutine 5 [chan receive, 5~10 minutes, locked to thread]:   HEADER
    main.(*T).run(0xc000010000, {0x1, 0x2}, 0x3?, ...)            CALL
    \t/home/u/src/app/t.go:12 +0x1d                               FILE
    ...additional frames elided...                                ELIDED
    created by main.main in goroutine 1                           CREATED_BY
    \tgoroutine running on other thread; stack unavailable        UNAVAILABLE

Lines matching none of these are OTHER: the dump parser decides whether
that is junk around the dump or a syntax error inside a block.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from stackfold.domain.exceptions import FrameSyntaxError
from stackfold.domain.model.arg import ELIDED_NAME, Arg, Args
from stackfold.domain.model.call import Call
from stackfold.domain.model.configuration import DEFAULT_MAX_INLINE_ARGS
from stackfold.infrastructure.analyzers.symbol_parser import parse_symbol_lenient

_HEADER = re.compile(r"^[ \t]*goroutine (\d+)(?: [^\[\]]*)? \[([^\]]+)\]:$")
_MINUTES = re.compile(r"^(\d+)(?:~(\d+))? minutes$")
_FUNC = re.compile(r"^(\S.*)\(([^()]*)\)$")
_FILE_SUFFIX = r"(.+):(\d+)(?: \+0x[0-9a-fA-F]+)?(?: fp=0x[0-9a-fA-F]+ sp=0x[0-9a-fA-F]+(?: pc=0x[0-9a-fA-F]+)?)?$"
_FILE = re.compile(r"^[ \t]+" + _FILE_SUFFIX)
_CALL = re.compile(r"^(\S.*)\(([^()]*)\)[ \t]+" + _FILE_SUFFIX)
_CREATED_BY = re.compile(r"^created by (\S.*?)(?: in goroutine (\d+))?$")
_ELIDED = re.compile(r"^\.\.\.additional frames elided\.\.\.$")
_UNAVAILABLE = re.compile(r"^[ \t]+goroutine running on other thread; stack unavailable$")
_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")

LOCKED_TO_THREAD = "locked to thread"


class LineKind(Enum):
    """Kind of a dump line, see module docstring."""

    BLANK = auto()
    HEADER = auto()
    CALL = auto()
    FILE = auto()
    CREATED_BY = auto()
    ELIDED = auto()
    UNAVAILABLE = auto()
    OTHER = auto()


@dataclass(frozen=True, slots=True)
class GoroutineHeader:
    """Parsed "goroutine N [state, clauses...]:" line.

    Attributes:
        id: Goroutine id
        state: First clause (e.g., "chan receive")
        sleep_min: Minutes, lower bound (0 when absent)
        sleep_max: Minutes, upper bound
        locked_to_thread: "locked to thread" clause present
    """

    id: int
    state: str
    sleep_min: int = 0
    sleep_max: int = 0
    locked_to_thread: bool = False


def classify_line(line: str) -> LineKind:
    """Tell which grammar rule a line (without terminator) matches."""
    if not line.strip():
        return LineKind.BLANK
    if _HEADER.match(line):
        return LineKind.HEADER
    if _UNAVAILABLE.match(line):
        return LineKind.UNAVAILABLE
    if _FILE.match(line):
        return LineKind.FILE
    if _ELIDED.match(line):
        return LineKind.ELIDED
    if _CREATED_BY.match(line):
        return LineKind.CREATED_BY
    if _FUNC.match(line):
        return LineKind.CALL
    return LineKind.OTHER


def parse_header(line: str) -> GoroutineHeader | None:
    """Parse a goroutine header line, None if it is not one.

    Unknown clauses are ignored.
    """
    match = _HEADER.match(line)
    if match is None:
        return None

    state, *clauses = match.group(2).split(", ")
    sleep_min = sleep_max = 0
    locked = False
    for clause in clauses:
        if clause == LOCKED_TO_THREAD:
            locked = True
        elif minutes := _MINUTES.match(clause):
            sleep_min = int(minutes.group(1))
            sleep_max = int(minutes.group(2)) if minutes.group(2) else sleep_min

    return GoroutineHeader(
        id=int(match.group(1)),
        state=state,
        sleep_min=min(sleep_min, sleep_max),
        sleep_max=max(sleep_min, sleep_max),
        locked_to_thread=locked,
    )


def parse_func_line(line: str) -> tuple[str, str] | None:
    """Split a call line into (raw symbol, raw argument text)."""
    match = _FUNC.match(line)
    if match is None:
        return None
    return match.group(1), match.group(2)


def parse_file_line(line: str) -> tuple[str, int] | None:
    """Parse an indented "path:line [+0x..]" line into (path, line)."""
    match = _FILE.match(line)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def parse_created_by(line: str) -> tuple[str, int | None] | None:
    """Parse "created by X [in goroutine N]" into (raw symbol, N)."""
    match = _CREATED_BY.match(line)
    if match is None:
        return None
    creator = int(match.group(2)) if match.group(2) else None
    return match.group(1), creator


def is_elided_marker(line: str) -> bool:
    """Check for the runtime's frame count cap marker."""
    return _ELIDED.match(line) is not None


def is_unavailable_marker(line: str) -> bool:
    """Check for a goroutine whose stack the runtime could not print."""
    return _UNAVAILABLE.match(line) is not None


def parse_args(text: str) -> Args:
    """Parse the text between the call parenthesis.

    Inline structs are flattened. A lone "{...}" becomes a Name-form arg.
    A "..." after other words, at top level or inside a struct the
    runtime cut short, sets elided and must be the last word.

    Raises:
        FrameSyntaxError: Token is neither a number nor an identifier,
            or braces are unbalanced.
    """
    values: list[Arg] = []
    elided = False
    # Words seen so far in each open brace group, innermost last.
    groups: list[int] = []

    for token in text.replace("{", ",{,").replace("}", ",},").split(","):
        token = token.strip()
        if not token:
            continue
        if token == "{":
            if groups:
                groups[-1] += 1
            groups.append(0)
            continue
        if token == "}":
            if not groups:
                raise FrameSyntaxError(f"unbalanced '}}' in arguments {text!r}")
            groups.pop()
            continue
        if token == ELIDED_NAME and not (groups and groups[-1] == 0):
            elided = True
            continue
        if elided:
            raise FrameSyntaxError(f"argument after '...' in {text!r}")
        if groups:
            groups[-1] += 1
        values.append(Arg(name=ELIDED_NAME) if token == ELIDED_NAME else _parse_arg(token))

    if groups:
        raise FrameSyntaxError(f"unbalanced '{{' in arguments {text!r}")
    return Args(values=tuple(values), elided=elided)


def check_elision(args: Args, max_inline_args: int = DEFAULT_MAX_INLINE_ARGS) -> None:
    """Verify an elided list holds exactly max_inline_args words.

    Raises:
        FrameSyntaxError: The count does not match.
    """
    if args.elided and len(args) != max_inline_args:
        raise FrameSyntaxError(f"elided argument list has {len(args)} words, expected {max_inline_args}")


def parse_call_line(text: str, *, max_inline_args: int = DEFAULT_MAX_INLINE_ARGS) -> Call | None:
    """Parse one frame into an unresolved Call.

    Accepts either the two printed lines ("func(args)" then the indented
    "path:line") or both joined on one line. Returns None when the text
    is blank or is not a frame.

    Raises:
        FrameSyntaxError: Arguments are malformed, the elision count is
            wrong, or a call line has no usable path:line.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines or len(lines) > 2:
        return None

    if len(lines) == 1:
        match = _CALL.match(lines[0])
        if match is None:
            return None
        symbol, raw_args, path, line_no = match.group(1), match.group(2), match.group(3), int(match.group(4))
    else:
        func_line = parse_func_line(lines[0])
        if func_line is None:
            return None
        location = parse_file_line(lines[1])
        if location is None:
            raise FrameSyntaxError("call line is not followed by path:line", line=lines[1])
        (symbol, raw_args), (path, line_no) = func_line, location

    args = parse_args(raw_args)
    check_elision(args, max_inline_args)
    return Call(func=parse_symbol_lenient(symbol), args=args, remote_src_path=path, line=line_no)


def _parse_arg(token: str) -> Arg:
    inaccurate = token.endswith("?")
    core = token[:-1] if inaccurate else token
    try:
        return Arg(value=int(core, 0), inaccurate=inaccurate)
    except ValueError:
        pass
    if not inaccurate and _IDENT.match(core):
        return Arg(name=core)
    raise FrameSyntaxError(f"cannot parse argument {token!r}")
