"""Generation diagnostics - error kinds, source locations and the error type units raise."""

import ast
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Reasons a generation unit rejects a declaration."""

    MALFORMED_KEY = "MalformedKey"
    NON_STRING_VALUE = "NonStringValue"
    UNKNOWN_KEY = "UnknownKey"
    MISSING_FIELD = "MissingField"
    UNSUPPORTED_DECLARATION_KIND = "UnsupportedDeclarationKind"
    MISSING_SUBSCRIPTIONS_ANNOTATION = "MissingSubscriptionsAnnotation"
    MALFORMED_EVENT_TOKEN = "MalformedEventToken"
    INVALID_SYNTAX = "InvalidSyntax"
    INVALID_MODULE_NAME = "InvalidModuleName"


class Location(BaseModel):
    """Source span. Lines and columns are 1-based."""

    path: str
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @classmethod
    def of(cls, node: ast.AST, path: Path) -> "Location":
        """Span of an ast node (ast columns are 0-based)."""
        end_line = getattr(node, "end_lineno", None)
        end_col = getattr(node, "end_col_offset", None)
        return cls(
            path=str(path),
            line=node.lineno,
            column=node.col_offset + 1,
            end_line=end_line,
            end_column=end_col + 1 if end_col is not None else None,
        )

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


class Diagnostic(BaseModel):
    """A single reported generation failure."""

    kind: ErrorKind
    message: str
    location: Location
    subject: Optional[str] = Field(
        default=None,
        description="Offending key, field or declaration name, when there is one",
    )

    def format(self) -> str:
        return f"{self.location}: error[{self.kind.value}]: {self.message}"


class GenerationError(Exception):
    """Raised by a generation unit when a declaration cannot be generated."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.format())
        self.diagnostic = diagnostic

    @classmethod
    def at(
        cls,
        kind: ErrorKind,
        node: ast.AST,
        path: Path,
        message: str,
        subject: Optional[str] = None,
    ) -> "GenerationError":
        """Build an error pointing at an ast node."""
        return cls(
            Diagnostic(
                kind=kind,
                message=message,
                location=Location.of(node, path),
                subject=subject,
            )
        )

    @property
    def kind(self) -> ErrorKind:
        return self.diagnostic.kind


def syntax_diagnostic(error: SyntaxError, path: Path) -> Diagnostic:
    """Convert a SyntaxError raised by ``ast.parse`` into a diagnostic."""
    return Diagnostic(
        kind=ErrorKind.INVALID_SYNTAX,
        message=error.msg or "invalid syntax",
        location=Location(
            path=str(path),
            line=error.lineno or 1,
            column=error.offset or 1,
        ),
    )


def module_name_diagnostic(module_name: str, path: Path) -> Diagnostic:
    """Report a source file whose module name cannot be imported by generated code."""
    return Diagnostic(
        kind=ErrorKind.INVALID_MODULE_NAME,
        message=(
            f"'{module_name}' is not an importable module name. "
            "Rename the file or pass --source-root so it resolves to a package path"
        ),
        location=Location(path=str(path), line=1, column=1),
        subject=module_name,
    )
