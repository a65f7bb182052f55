"""Domain exceptions: all public errors of stackfold.

All exceptions visible to users are defined in the domain layer.
Infrastructure/Application raise these, they do not define their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stackfold.domain.model.goroutine import Goroutine


class StackfoldError(Exception):
    """Base for all stackfold error exceptions.

    Allows: except StackfoldError to catch all library errors.
    """


class ParseError(StackfoldError, ValueError):
    """Dump text could not be turned into structured records.

    Inherits ValueError for semantic correctness (bad input value).

    Attributes:
        reason: Error description.
        line_no: 1-based line number in the dump, 0 when not applicable.
        line: Offending line, without its line terminator.
    """

    def __init__(self, reason: str, *, line_no: int = 0, line: str = "") -> None:
        """Initialize with reason and optional position."""
        if not reason:
            raise ValueError("reason must not be empty")
        if line_no < 0:
            raise ValueError(f"line_no must be >= 0, got {line_no}")

        self.reason = reason
        self.line_no = line_no
        self.line = line
        if line_no:
            super().__init__(f"line {line_no}: {reason}: {line!r}")
        else:
            super().__init__(reason)


class SymbolDecodeError(ParseError):
    """Mangled function symbol could not be decoded.

    Raised on malformed %XX escapes, invalid UTF-8 after decoding,
    or unbalanced receiver parenthesis.

    Attributes:
        raw: The symbol as found in the dump.
    """

    def __init__(self, raw: str, reason: str) -> None:
        """Initialize with the raw symbol and why it failed."""
        self.raw = raw
        super().__init__(f"bad function reference {raw!r}: {reason}")


class FrameSyntaxError(ParseError):
    """Line inside a goroutine block matches no known grammar.

    Fatal in strict mode; lenient scanning reports the line as
    unclassified instead.
    """


class TruncatedInputError(ParseError):
    """Input ended in the middle of a goroutine block.

    Never silently dropped. The partially built goroutine is included
    in goroutines so callers can inspect what was recovered.

    Attributes:
        goroutines: Every goroutine parsed, the partial one last.
    """

    def __init__(
        self,
        reason: str,
        *,
        goroutines: tuple[Goroutine, ...],
        line_no: int = 0,
        line: str = "",
    ) -> None:
        """Initialize with reason and recovered goroutines."""
        self.goroutines = goroutines
        super().__init__(reason, line_no=line_no, line=line)
