from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class CallableReference:
    """Identifies a named, possibly overloaded callable.

    `scope` may be a single module name or a sequence of them; it is always
    stored as a tuple (or None for an unrestricted lookup).
    """
    name: str
    signature: tuple | None = None  # Type descriptors (classes or class names)
    scope: tuple[str, ...] | None = None

    def __post_init__(self):
        if isinstance(self.scope, str):
            object.__setattr__(self, "scope", (self.scope,))
        elif self.scope is not None:
            object.__setattr__(self, "scope", tuple(self.scope))
        if self.signature is not None:
            object.__setattr__(self, "signature", tuple(self.signature))


@dataclass(frozen=True)
class DefinitionSite:
    """A located point of definition (1-indexed line)."""
    file_path: str
    start_line: int

    def __post_init__(self):
        if self.start_line < 1:
            raise ValueError(f"start_line must be positive, got {self.start_line}")

    def __str__(self) -> str:
        return f"{self.file_path}:{self.start_line}"


@dataclass(frozen=True)
class Candidate:
    """One element of a candidate set: a site plus a label for display."""
    site: DefinitionSite
    label: str = ""


@dataclass(frozen=True)
class ExtractedSource:
    """Contiguous lines forming one complete top-level unit."""
    site: DefinitionSite
    lines: tuple[str, ...]

    def __post_init__(self):
        if not self.lines:
            raise ValueError(f"No source lines for {self.site}")

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def end_line(self) -> int:
        """Last line of the extent (1-indexed, inclusive)."""
        return self.site.start_line + len(self.lines) - 1

    def to_dict(self) -> dict:
        return {
            "path": self.site.file_path,
            "start": self.site.start_line,
            "end": self.end_line,
            "code": self.text,
        }


class Completeness(Enum):
    """Classification of a source prefix by the syntax oracle."""
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


@dataclass(frozen=True)
class ParseOutcome:
    """Result of asking the syntax oracle about a source prefix."""
    state: Completeness
    tree: Any = None  # Parser-specific syntax tree, set when COMPLETE
    error: Exception | None = None  # Set when INCOMPLETE/INVALID came from an error

    @property
    def is_complete(self) -> bool:
        return self.state is Completeness.COMPLETE


@dataclass
class Parameter:
    """Represents a function/method parameter."""
    name: str
    type: str | None = None  # None if no type hint
    default: str | None = None  # None if no default value


@dataclass
class Definition:
    """A function, class or method definition found by a static scan."""
    kind: str
    qualname: str
    line: int  # 1-indexed, includes decorators
    params: list[Parameter] = field(default_factory=list)
