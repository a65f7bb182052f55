"""Dump parser service: goroutine dump text -> Goroutines.

A block looks like:

    goroutine 5 [chan receive, 5 minutes]:          header
    main.worker(0xc000010000, 0x2)                  \\
    \t/home/u/src/app/main.go:12 +0x1d               > frames, leaf first
    ...additional frames elided...                  /  optional cap marker
    created by main.main in goroutine 1             \\ optional creator
    \t/home/u/src/app/main.go:7 +0x2b                /
                                                    blank line ends the block

Two entry points share one scanner:
- parse_dump: strict. Any unrecognized line inside a block raises
  FrameSyntaxError, input ending mid-block raises TruncatedInputError.
- scan_dump: lenient. Interleaved log output is collected as unclassified
  lines; truncation is reported on the result instead of raised.

Text outside blocks (the panic message before, "exit status 2" after)
is never an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum, auto

from stackfold.application.services.labels import label_shared_pointers
from stackfold.domain.exceptions import FrameSyntaxError, TruncatedInputError
from stackfold.domain.model.arg import Args
from stackfold.domain.model.call import UNAVAILABLE_SRC, Call
from stackfold.domain.model.configuration import ParseOptions, RootConfig
from stackfold.domain.model.dump_scan import DumpScan, UnclassifiedLine
from stackfold.domain.model.func import Func
from stackfold.domain.model.goroutine import Goroutine
from stackfold.domain.model.signature import Signature
from stackfold.domain.model.stack import Stack
from stackfold.infrastructure.analyzers.frame_parser import (
    GoroutineHeader,
    LineKind,
    check_elision,
    classify_line,
    parse_args,
    parse_created_by,
    parse_file_line,
    parse_func_line,
    parse_header,
)
from stackfold.infrastructure.analyzers.path_resolver import resolve_stack
from stackfold.infrastructure.analyzers.symbol_parser import parse_symbol_lenient

logger = logging.getLogger(__name__)

# Function recorded for a goroutine whose stack the runtime could not print.
_UNAVAILABLE_FUNC = Func.opaque("?")


def parse_dump(
    text: str,
    config: RootConfig | None = None,
    *,
    options: ParseOptions | None = None,
) -> tuple[Goroutine, ...]:
    """Parse a goroutine dump strictly.

    Args:
        text: Complete dump text, junk before and after allowed.
        config: Roots for location resolution. None = leave unresolved.
        options: Parser limits. None = defaults.

    Returns:
        Goroutines in dump order.

    Raises:
        FrameSyntaxError: Unrecognized or malformed line inside a block.
        TruncatedInputError: Input ended mid-block.
    """
    return _DumpScanner(config, options or ParseOptions(), strict=True).run(text).goroutines


def scan_dump(
    text: str,
    config: RootConfig | None = None,
    *,
    options: ParseOptions | None = None,
) -> DumpScan:
    """Parse a goroutine dump leniently, tolerating interleaved output.

    Args:
        text: Dump text, possibly mixed with unrelated log lines.
        config: Roots for location resolution. None = leave unresolved.
        options: Parser limits. None = defaults.

    Returns:
        DumpScan with goroutines, unclassified lines and truncation.
    """
    return _DumpScanner(config, options or ParseOptions(), strict=False).run(text)


class _State(Enum):
    OUTSIDE = auto()  # between blocks
    FRAMES = auto()  # expecting a call, marker, "created by" or blank
    CALL_PENDING = auto()  # call seen, expecting its path:line
    ELIDED = auto()  # frame cap hit, only "created by" or blank may follow


@dataclass(slots=True)
class _Block:
    """Goroutine under construction. Frames are kept in print order."""

    header: GoroutineHeader
    header_line_no: int
    calls: list[Call] = field(default_factory=list)
    elided: bool = False
    created: list[Call] = field(default_factory=list)
    created_elided: bool = False
    in_created: bool = False
    created_by_id: int | None = None

    @property
    def target(self) -> list[Call]:
        return self.created if self.in_created else self.calls


@dataclass(slots=True)
class _Pending:
    """Call line waiting for its path:line. symbol None = discarded."""

    symbol: str | None
    args: Args | None
    line_no: int
    text: str


class _DumpScanner:
    """Line driven state machine. One instance per parse."""

    def __init__(self, config: RootConfig | None, options: ParseOptions, *, strict: bool) -> None:
        self._config = config
        self._options = options
        self._strict = strict

        self._state = _State.OUTSIDE
        self._block: _Block | None = None
        self._pending: _Pending | None = None
        self._goroutines: list[Goroutine] = []
        self._unclassified: list[UnclassifiedLine] = []
        # Raw lines since the last block closed: prefix, suffix or junk.
        self._outside: list[tuple[int, str]] = []
        self._prefix = ""
        self._truncated: TruncatedInputError | None = None

    def run(self, text: str) -> DumpScan:
        for line_no, raw, line in _iter_lines(text):
            self._feed(line_no, raw, line)
        self._finish()

        goroutines = label_shared_pointers([self._resolve(g) for g in self._goroutines])
        if self._truncated is not None:
            self._truncated.goroutines = goroutines
            if self._strict:
                raise self._truncated
        suffix = "".join(raw for _, raw in self._outside) if self._goroutines else ""
        prefix = self._prefix if self._goroutines else "".join(raw for _, raw in self._outside)

        logger.info("Parsed %d goroutines, %d unclassified lines", len(goroutines), len(self._unclassified))
        return DumpScan(
            goroutines=goroutines,
            unclassified=tuple(self._unclassified),
            prefix=prefix,
            suffix=suffix,
            truncated=self._truncated,
        )

    # Dispatch

    def _feed(self, line_no: int, raw: str, line: str) -> None:
        kind = LineKind.OTHER if len(line) > self._options.max_line_length else classify_line(line)

        if self._state is _State.OUTSIDE:
            header = parse_header(line) if kind is LineKind.HEADER else None
            if header is None:
                self._outside.append((line_no, raw))
            else:
                self._open(line_no, header)
            return

        if self._state is _State.CALL_PENDING:
            if kind is LineKind.FILE:
                self._complete_call(line_no, line)
                return
            if kind is LineKind.OTHER and not self._strict:
                # Interleaved output: the call keeps waiting for its path:line.
                self._reject(line_no, line, "unrecognized line inside goroutine block")
                return
            self._abandon_pending(line_no, line)

        match kind:
            case LineKind.BLANK:
                self._close(line_no)
            case LineKind.HEADER:
                self._close(line_no)
                self._feed(line_no, raw, line)
            case LineKind.CALL:
                self._on_call(line_no, line)
            case LineKind.CREATED_BY:
                self._on_created_by(line_no, line)
            case LineKind.ELIDED:
                self._on_elided(line_no, line)
            case LineKind.UNAVAILABLE:
                self._on_unavailable(line_no, line)
            case LineKind.FILE:
                self._reject(line_no, line, "path:line without a preceding call")
            case LineKind.OTHER:
                self._reject(line_no, line, "unrecognized line inside goroutine block")

    # Block lifecycle

    def _open(self, line_no: int, header: GoroutineHeader) -> None:
        if not self._goroutines:
            self._prefix = "".join(raw for _, raw in self._outside)
        else:
            self._unclassified.extend(
                UnclassifiedLine(n, raw.rstrip("\r\n")) for n, raw in self._outside if raw.strip()
            )
        self._outside = []
        self._block = _Block(header=header, header_line_no=line_no)
        self._state = _State.FRAMES

    def _close(self, line_no: int) -> None:
        block = self._current_block()
        if not block.calls:
            self._reject(line_no, "", f"goroutine {block.header.id} has no frames")
        self._goroutines.append(self._build(block))
        logger.debug("Parsed goroutine %d with %d frames", block.header.id, len(block.calls))
        self._block = None
        self._state = _State.OUTSIDE

    def _finish(self) -> None:
        if self._state is _State.OUTSIDE:
            return
        block = self._current_block()
        if self._state is _State.CALL_PENDING or not block.calls:
            pending = self._pending
            self._pending = None
            self._goroutines.append(self._build(block))
            line_no, line = (pending.line_no, pending.text) if pending else (block.header_line_no, "")
            self._truncated = TruncatedInputError(
                f"input ended inside goroutine {block.header.id}",
                goroutines=(),
                line_no=line_no,
                line=line,
            )
            logger.warning("%s", self._truncated)
        else:
            self._goroutines.append(self._build(block))
        self._block = None
        self._state = _State.OUTSIDE

    def _build(self, block: _Block) -> Goroutine:
        header = block.header
        signature = Signature(
            state=header.state,
            stack=Stack(calls=tuple(reversed(block.calls)), elided=block.elided),
            created_by=Stack(calls=tuple(reversed(block.created)), elided=block.created_elided),
            sleep_min=header.sleep_min,
            sleep_max=header.sleep_max,
            locked_to_thread=header.locked_to_thread,
        )
        return Goroutine(
            id=header.id,
            signature=signature,
            first=not self._goroutines,
            created_by_id=block.created_by_id,
        )

    def _resolve(self, goroutine: Goroutine) -> Goroutine:
        """Location resolution, a second pass over the parsed calls."""
        if self._config is None:
            return goroutine
        signature = replace(
            goroutine.signature,
            stack=resolve_stack(goroutine.signature.stack, self._config),
            created_by=resolve_stack(goroutine.signature.created_by, self._config),
        )
        return replace(goroutine, signature=signature)

    # Line handlers

    def _on_call(self, line_no: int, line: str) -> None:
        block = self._current_block()
        if self._state is _State.ELIDED:
            self._reject(line_no, line, "frame after the elision marker")
            return

        parsed = parse_func_line(line)
        if parsed is None:
            self._reject(line_no, line, "unrecognized line inside goroutine block")
            return
        symbol, raw_args = parsed

        if len(block.target) >= self._options.max_stack_depth:
            self._reject(line_no, line, f"stack deeper than {self._options.max_stack_depth} frames")
            self._skip_call(line_no, line)
            return

        try:
            args = parse_args(raw_args)
        except FrameSyntaxError as e:
            if self._strict:
                raise FrameSyntaxError(e.reason, line_no=line_no, line=line) from e
            self._reject(line_no, line, e.reason)
            self._skip_call(line_no, line)
            return

        try:
            check_elision(args, self._options.max_inline_args)
        except FrameSyntaxError as e:
            if self._strict:
                raise FrameSyntaxError(e.reason, line_no=line_no, line=line) from e
            logger.warning("line %d: %s", line_no, e.reason)

        self._pending = _Pending(symbol=symbol, args=args, line_no=line_no, text=line)
        self._state = _State.CALL_PENDING

    def _skip_call(self, line_no: int, line: str) -> None:
        """Drop a rejected call; its path:line is reported unclassified too."""
        self._pending = _Pending(symbol=None, args=None, line_no=line_no, text=line)
        self._state = _State.CALL_PENDING

    def _on_created_by(self, line_no: int, line: str) -> None:
        block = self._current_block()
        if block.in_created:
            self._reject(line_no, line, "second 'created by' in goroutine block")
            return
        parsed = parse_created_by(line)
        if parsed is None:
            self._reject(line_no, line, "unrecognized line inside goroutine block")
            return
        symbol, creator = parsed
        block.in_created = True
        block.created_by_id = creator
        self._pending = _Pending(symbol=symbol, args=None, line_no=line_no, text=line)
        self._state = _State.CALL_PENDING

    def _on_elided(self, line_no: int, line: str) -> None:
        block = self._current_block()
        if block.in_created:
            block.created_elided = True
        else:
            block.elided = True
        self._state = _State.ELIDED

    def _on_unavailable(self, line_no: int, line: str) -> None:
        block = self._current_block()
        if block.calls or block.in_created:
            self._reject(line_no, line, "stack unavailable marker after frames")
            return
        block.calls.append(Call(func=_UNAVAILABLE_FUNC, remote_src_path=UNAVAILABLE_SRC))

    def _complete_call(self, line_no: int, line: str) -> None:
        block = self._current_block()
        pending = self._take_pending()
        self._state = _State.ELIDED if self._in_elided_section(block) else _State.FRAMES

        if pending.symbol is None:
            self._unclassified.append(UnclassifiedLine(line_no, line))
            return

        location = parse_file_line(line)
        if location is None:
            self._reject(line_no, line, "malformed path:line")
            return
        path, src_line = location
        call = Call(
            func=parse_symbol_lenient(pending.symbol),
            args=pending.args if pending.args is not None else Args(),
            remote_src_path=path,
            line=src_line,
        )
        block.target.append(call)

    def _abandon_pending(self, line_no: int, line: str) -> None:
        """A call line was not followed by path:line."""
        block = self._current_block()
        pending = self._take_pending()
        self._state = _State.ELIDED if self._in_elided_section(block) else _State.FRAMES
        if pending.symbol is None:
            return
        if self._strict:
            raise FrameSyntaxError("call line not followed by path:line", line_no=line_no, line=line)
        logger.warning("line %d: call line not followed by path:line", pending.line_no)
        self._unclassified.append(UnclassifiedLine(pending.line_no, pending.text))

    def _current_block(self) -> _Block:
        if self._block is None:
            raise RuntimeError(f"no goroutine block open in state {self._state.name}")
        return self._block

    def _take_pending(self) -> _Pending:
        pending = self._pending
        if pending is None:
            raise RuntimeError("no call line waiting for its path:line")
        self._pending = None
        return pending

    def _in_elided_section(self, block: _Block) -> bool:
        return block.created_elided if block.in_created else block.elided

    def _reject(self, line_no: int, line: str, reason: str) -> None:
        """Fail in strict mode, record the line in lenient mode."""
        if self._strict:
            raise FrameSyntaxError(reason, line_no=line_no, line=line)
        logger.warning("line %d: %s", line_no, reason)
        if line:
            self._unclassified.append(UnclassifiedLine(line_no, line))


def _iter_lines(text: str) -> Iterator[tuple[int, str, str]]:
    """Yield (line_no, raw line with terminator, line without it)."""
    lines = text.split("\n")
    last = len(lines) - 1
    for index, line in enumerate(lines):
        if index == last:
            if not line:
                return
            yield index + 1, line, line.rstrip("\r")
        else:
            yield index + 1, line + "\n", line.rstrip("\r")
