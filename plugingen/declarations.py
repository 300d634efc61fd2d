"""Declaration context - an annotated class or function as read from source."""
from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from plugingen.constants import ENUM_BASES, MARKERS

logger = logging.getLogger(__name__)

DeclarationNode = Union[ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef]


class DeclarationKind(str, Enum):
    """What an annotated declaration is."""

    CLASS = "class"
    ENUM = "enum"
    FUNCTION = "function"


def decorator_name(decorator: ast.expr) -> Optional[str]:
    """Final name of a decorator: ``plugin`` for ``@plugin``, ``@plugin(...)`` and ``@markers.plugin(...)``."""
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    if isinstance(target, ast.Name):
        return target.id
    if isinstance(target, ast.Attribute):
        return target.attr
    return None


def _base_name(base: ast.expr) -> Optional[str]:
    if isinstance(base, ast.Name):
        return base.id
    if isinstance(base, ast.Attribute):
        return base.attr
    return None


def declaration_kind(node: DeclarationNode) -> DeclarationKind:
    if not isinstance(node, ast.ClassDef):
        return DeclarationKind.FUNCTION
    if any(_base_name(base) in ENUM_BASES for base in node.bases):
        return DeclarationKind.ENUM
    return DeclarationKind.CLASS


@dataclass(frozen=True)
class Declaration:
    """A top-level declaration carrying at least one generator marker."""

    name: str
    kind: DeclarationKind
    node: DeclarationNode = field(repr=False, compare=False)
    path: Path

    @property
    def decorators(self) -> List[ast.expr]:
        return list(self.node.decorator_list)

    def find_decorators(self, marker: str) -> List[ast.expr]:
        """All decorators with the given final name, in source order."""
        return [d for d in self.node.decorator_list if decorator_name(d) == marker]

    def has_marker(self, marker: str) -> bool:
        return bool(self.find_decorators(marker))

    @property
    def is_struct(self) -> bool:
        return self.kind == DeclarationKind.CLASS


def collect_declarations(tree: ast.Module, path: Path) -> List[Declaration]:
    """Collect annotated top-level declarations of a module, in source order.

    Args:
        tree: Parsed module
        path: Source path, used for diagnostics

    Returns:
        Declarations with at least one of the ``plugin``, ``subscriptions``
        or ``handler`` decorators
    """
    declarations = []
    for node in tree.body:
        if not isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        if not any(decorator_name(d) in MARKERS for d in node.decorator_list):
            continue
        decl = Declaration(
            name=node.name,
            kind=declaration_kind(node),
            node=node,
            path=path,
        )
        logger.debug(f"Found annotated {decl.kind.value} '{decl.name}' at {path}:{node.lineno}")
        declarations.append(decl)
    return declarations
