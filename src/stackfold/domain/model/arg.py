"""Call argument value objects."""

from __future__ import annotations

from dataclasses import dataclass, replace

from stackfold.domain.model.enums import SimilarityPolicy

# Values above 4MiB and below the signed 64-bit ceiling are assumed to be
# pointers. A bitmask can fool this.
POINTER_FLOOR = 4 * 1024 * 1024
POINTER_CEILING = (1 << 63) - 1

# Name given to a nested "{...}" the runtime printed instead of a value.
ELIDED_NAME = "..."

# Name given to an argument whose value differs within a merged group.
MERGED_NAME = "*"

_DIGITS = "0123456789"


@dataclass(frozen=True, slots=True)
class Arg:
    """One argument word as rendered by the runtime.

    Exactly one of value or name is set: None is the discriminant,
    so a zero value never compares equal to an absent one.

    Attributes:
        value: Raw pointer-sized word, None for Name-form args
        name: Symbolic rendering (e.g., "_"), None for value-form args
        inaccurate: Runtime marked the value with a trailing "?"
        label: Stable "#N" tag of a pointer shared between goroutines,
            "" when unlabeled
    """

    value: int | None = None
    name: str | None = None
    inaccurate: bool = False
    label: str = ""

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if (self.value is None) == (self.name is None):
            raise ValueError("exactly one of value or name must be set")
        if self.value is not None and self.value < 0:
            raise ValueError(f"value must be >= 0, got {self.value}")
        if self.name is not None and not self.name:
            raise ValueError("name must not be empty")
        if self.inaccurate and self.value is None:
            raise ValueError("inaccurate only applies to value-form args")
        if self.label and self.value is None:
            raise ValueError("label only applies to value-form args")

    @property
    def is_name(self) -> bool:
        """Check if this is a Name-form argument."""
        return self.name is not None

    @property
    def is_ptr(self) -> bool:
        """Guess whether the value looks like a heap address."""
        return self.value is not None and POINTER_FLOOR < self.value < POINTER_CEILING

    def similar(self, other: Arg, policy: SimilarityPolicy) -> bool:
        """Check if two args are equal or close enough under policy."""
        if policy is not SimilarityPolicy.EXACT_FLAGS:
            return True
        if self.is_ptr and other.is_ptr:
            return True
        return self == other

    def sort_key(self) -> tuple[int, int, str, bool]:
        """Key ordering value-form args before Name-form args."""
        if self.value is not None:
            return (0, self.value, "", self.inaccurate)
        return (1, 0, self.name or "", False)

    def with_label(self, label: str) -> Arg:
        """Return a copy tagged with label."""
        return replace(self, label=label)

    def __str__(self) -> str:
        """Format as name, label, single digit, or hex value."""
        if self.value is None:
            return str(self.name)
        if self.label:
            return self.label
        text = _DIGITS[self.value] if self.value < len(_DIGITS) else f"0x{self.value:x}"
        return f"{text}?" if self.inaccurate else text


@dataclass(frozen=True, slots=True)
class Args:
    """Arguments of one call, in printed order.

    Attributes:
        values: Argument words; inline structs are flattened
        elided: Runtime dropped the tail and printed "..."
    """

    values: tuple[Arg, ...] = ()
    elided: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not isinstance(self.values, tuple):
            raise TypeError(f"values must be a tuple, got {type(self.values).__name__}")

    def __len__(self) -> int:
        """Number of printed argument words."""
        return len(self.values)

    def equal(self, other: Args) -> bool:
        """Check if both argument lists are exactly equal."""
        return self == other

    def similar(self, other: Args, policy: SimilarityPolicy) -> bool:
        """Check if two argument lists are equal or close enough under policy.

        Argument count and elision always matter.
        """
        if self.elided != other.elided or len(self.values) != len(other.values):
            return False
        return all(a.similar(b, policy) for a, b in zip(self.values, other.values, strict=True))

    def merge(self, other: Args) -> Args:
        """Combine with a similar list of the same length.

        Words that differ become the "*" Name-form arg; elision is kept.
        """
        values = tuple(
            a if a == b else Arg(name=MERGED_NAME) for a, b in zip(self.values, other.values, strict=True)
        )
        return Args(values=values, elided=self.elided)

    def sort_key(self) -> tuple[tuple[tuple[int, int, str, bool], ...], bool]:
        """Key for deterministic ordering."""
        return (tuple(a.sort_key() for a in self.values), self.elided)

    def __str__(self) -> str:
        """Format as comma separated list, "..." appended when elided."""
        items = [str(a) for a in self.values]
        if self.elided:
            items.append(ELIDED_NAME)
        return ", ".join(items)
