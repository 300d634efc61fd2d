"""Descriptor unit - reads ``@plugin(...)`` and emits the ``Plugin`` implementation."""

import ast
import logging
from pathlib import Path
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from plugingen.constants import DESCRIPTOR_KEYS, DESCRIPTOR_MARKER, RUNTIME_ALIAS
from plugingen.declarations import Declaration
from plugingen.diagnostics import ErrorKind, GenerationError
from plugingen.units import GenerationUnit, ImplBlock

logger = logging.getLogger(__name__)

INDENT = "    "


class PluginDescriptor(BaseModel):
    """Validated ``@plugin(...)`` annotation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique plugin identifier")
    name: str = Field(..., description="Human-readable plugin name")
    version: str = Field(..., description="Plugin version")
    api_version: str = Field(..., description="Host API version, from the 'api' key")


def _pairs(decorator: ast.expr) -> List[ast.AST]:
    """Arguments of the decorator call in source order."""
    if not isinstance(decorator, ast.Call):
        return []
    items = list(decorator.args) + list(decorator.keywords)
    return sorted(items, key=lambda n: (n.lineno, n.col_offset))


def read_pairs(decorator: ast.expr, path: Path) -> Dict[str, str]:
    """Read ``key = "value"`` pairs from a ``@plugin(...)`` decorator.

    Pairs are checked in source order; the first violation is raised.

    Args:
        decorator: The decorator node
        path: Source path, for diagnostics

    Returns:
        Mapping of recognised keys to their literal values

    Raises:
        GenerationError: MalformedKey, NonStringValue or UnknownKey
    """
    values: Dict[str, str] = {}
    for item in _pairs(decorator):
        if not isinstance(item, ast.keyword) or item.arg is None:
            raise GenerationError.at(
                ErrorKind.MALFORMED_KEY,
                item,
                path,
                'Expected `key = "value"` format with an identifier key (e.g. id = "my-plugin")',
            )

        key = item.arg
        value = item.value
        if not (isinstance(value, ast.Constant) and isinstance(value.value, str)):
            raise GenerationError.at(
                ErrorKind.NON_STRING_VALUE,
                value,
                path,
                f"Expected a string literal for '{key}'",
                subject=key,
            )

        if key not in DESCRIPTOR_KEYS:
            raise GenerationError.at(
                ErrorKind.UNKNOWN_KEY,
                item,
                path,
                f"Unknown key '{key}'. Expected 'id', 'name', 'version', or 'api'",
                subject=key,
            )

        values[key] = value.value
    return values


def parse_descriptor(decorator: ast.expr, path: Path) -> PluginDescriptor:
    """Parse and validate a ``@plugin(...)`` decorator into a descriptor.

    Missing fields are reported against the whole decorator, checked in the
    order id, name, version, api.
    """
    values = read_pairs(decorator, path)
    return build_descriptor(values, decorator, path)


def build_descriptor(values: Dict[str, str], decorator: ast.expr, path: Path) -> PluginDescriptor:
    for key in DESCRIPTOR_KEYS:
        if key not in values:
            raise GenerationError.at(
                ErrorKind.MISSING_FIELD,
                decorator,
                path,
                f"Missing required field '{key}'",
                subject=key,
            )
    return PluginDescriptor(
        id=values["id"],
        name=values["name"],
        version=values["version"],
        api_version=values["api"],
    )


def _accessor(name: str, value: str) -> List[str]:
    return [
        f"{INDENT}def {name}(self) -> str:",
        f"{INDENT * 2}return {value!r}",
    ]


def emit_plugin(descriptor: PluginDescriptor, type_name: str) -> ImplBlock:
    """Emit the five ``Plugin`` accessors for a type.

    Values are written as Python string literals, so each accessor returns
    exactly the annotated string.
    """
    lines = [
        f"{INDENT}def get_info(self) -> {RUNTIME_ALIAS}.PluginInfo:",
        f"{INDENT * 2}return {RUNTIME_ALIAS}.PluginInfo(",
        f"{INDENT * 3}id={descriptor.id!r},",
        f"{INDENT * 3}name={descriptor.name!r},",
        f"{INDENT * 3}version={descriptor.version!r},",
        f"{INDENT * 3}api_version={descriptor.api_version!r},",
        f"{INDENT * 2})",
        "",
    ]
    accessors: List[Tuple[str, str]] = [
        ("get_id", descriptor.id),
        ("get_name", descriptor.name),
        ("get_version", descriptor.version),
        ("get_api_version", descriptor.api_version),
    ]
    for name, value in accessors:
        lines.extend(_accessor(name, value))
        lines.append("")
    lines.pop()

    logger.debug(f"Emitted Plugin implementation for {type_name} ({descriptor.id})")
    return ImplBlock(interface="Plugin", lines=lines)


class DescriptorUnit(GenerationUnit):
    """Generates ``Plugin`` from ``@plugin(id=..., name=..., version=..., api=...)``."""

    name = "descriptor"
    interface = "Plugin"

    def applies_to(self, decl: Declaration) -> bool:
        return decl.has_marker(DESCRIPTOR_MARKER)

    def parse(self, decl: Declaration) -> Tuple[ast.expr, Dict[str, str]]:
        decorators = decl.find_decorators(DESCRIPTOR_MARKER)
        if len(decorators) > 1:
            logger.warning(
                f"{decl.name} has {len(decorators)} @{DESCRIPTOR_MARKER} decorators, using the first"
            )
        decorator = decorators[0]
        if not decl.is_struct:
            raise GenerationError.at(
                ErrorKind.UNSUPPORTED_DECLARATION_KIND,
                decl.node,
                decl.path,
                f"@{DESCRIPTOR_MARKER}(...) can only be used on a plain class, not on {decl.kind.value} '{decl.name}'",
                subject=decl.name,
            )
        return decorator, read_pairs(decorator, decl.path)

    def validate(self, decl: Declaration, parsed: Tuple[ast.expr, Dict[str, str]]) -> PluginDescriptor:
        decorator, values = parsed
        return build_descriptor(values, decorator, decl.path)

    def emit(self, decl: Declaration, validated: PluginDescriptor) -> ImplBlock:
        return emit_plugin(validated, decl.name)
