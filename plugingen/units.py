"""Generation unit abstract base class and related types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from plugingen.declarations import Declaration


class GenerationState(str, Enum):
    """Per-declaration generation states."""

    START = "start"
    PARSING = "parsing"
    VALIDATING = "validating"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ImplBlock:
    """Implementation emitted by one unit for one declaration."""

    interface: str  # e.g. "Plugin"
    lines: List[str] = field(default_factory=list)  # method source, indented for a class body

    def render(self) -> str:
        return "\n".join(self.lines)


class GenerationUnit(ABC):
    """A parse → validate → emit pipeline for one capability interface.

    Units hold no state between calls; each method is a pure function of
    its arguments and raises ``GenerationError`` on a rule violation.
    """

    name: str = ""
    interface: str = ""

    @abstractmethod
    def applies_to(self, decl: Declaration) -> bool:
        """Whether the declaration carries this unit's trigger annotation."""
        ...

    @abstractmethod
    def parse(self, decl: Declaration) -> Any:
        """Read the annotation into a raw structure."""
        ...

    @abstractmethod
    def validate(self, decl: Declaration, parsed: Any) -> Any:
        """Check completeness and return the validated record."""
        ...

    @abstractmethod
    def emit(self, decl: Declaration, validated: Any) -> ImplBlock:
        """Produce the implementation. Cannot fail."""
        ...
