"""Subscription unit - reads ``@subscriptions(...)`` and emits the ``PluginSubscriptions`` implementation."""

import ast
import logging
from typing import List, Tuple

from plugingen.constants import HANDLER_MARKER, RUNTIME_ALIAS, SUBSCRIPTIONS_MARKER
from plugingen.declarations import Declaration
from plugingen.diagnostics import ErrorKind, GenerationError
from plugingen.units import GenerationUnit, ImplBlock

logger = logging.getLogger(__name__)

INDENT = "    "
EXAMPLE = f"@{SUBSCRIPTIONS_MARKER}(Chat, PlayerJoin)"


def _malformed(node: ast.AST, decl: Declaration, message: str) -> GenerationError:
    return GenerationError.at(ErrorKind.MALFORMED_EVENT_TOKEN, node, decl.path, message)


def find_subscriptions_annotation(decl: Declaration) -> ast.expr:
    """Return the ``@subscriptions(...)`` decorator of a declaration.

    Raises:
        GenerationError: MissingSubscriptionsAnnotation when there is none
    """
    decorators = decl.find_decorators(SUBSCRIPTIONS_MARKER)
    if not decorators:
        raise GenerationError.at(
            ErrorKind.MISSING_SUBSCRIPTIONS_ANNOTATION,
            decl.node,
            decl.path,
            f"Missing @{SUBSCRIPTIONS_MARKER}(...) decorator on '{decl.name}'. "
            f"Please list the events to subscribe to, e.g. {EXAMPLE}",
            subject=decl.name,
        )
    if len(decorators) > 1:
        logger.warning(
            f"{decl.name} has {len(decorators)} @{SUBSCRIPTIONS_MARKER} decorators, using the first"
        )
    return decorators[0]


def read_event_tokens(decorator: ast.expr, decl: Declaration) -> Tuple[str, ...]:
    """Read the bare event names from a ``@subscriptions(...)`` decorator.

    Names are returned as written: order kept, duplicates kept, and no check
    against the EventType members.
    """
    if not isinstance(decorator, ast.Call):
        raise _malformed(
            decorator,
            decl,
            f"Expected a parenthesized list of event names, e.g. {EXAMPLE}",
        )
    tokens = sorted(
        list(decorator.args) + list(decorator.keywords),
        key=lambda n: (n.lineno, n.col_offset),
    )
    events: List[str] = []
    for token in tokens:
        if isinstance(token, ast.keyword):
            raise _malformed(token, decl, "Expected an event name, not a keyword argument")
        if not isinstance(token, ast.Name):
            raise _malformed(
                token,
                decl,
                f"Expected a bare event name (e.g. Chat), got '{ast.unparse(token)}'",
            )
        events.append(token.id)
    return tuple(events)


def parse_subscriptions(decl: Declaration) -> Tuple[str, ...]:
    """Parse the subscription list of a declaration.

    Args:
        decl: Declaration carrying ``@handler`` and/or ``@subscriptions(...)``

    Returns:
        Event names in annotation order

    Raises:
        GenerationError: UnsupportedDeclarationKind, MissingSubscriptionsAnnotation
            or MalformedEventToken
    """
    if not decl.is_struct:
        raise GenerationError.at(
            ErrorKind.UNSUPPORTED_DECLARATION_KIND,
            decl.node,
            decl.path,
            f"@{HANDLER_MARKER}/@{SUBSCRIPTIONS_MARKER} can only be used on a plain class, "
            f"not on {decl.kind.value} '{decl.name}'",
            subject=decl.name,
        )
    decorator = find_subscriptions_annotation(decl)
    return read_event_tokens(decorator, decl)


def emit_subscriptions(events: Tuple[str, ...], type_name: str) -> ImplBlock:
    """Emit ``get_subscriptions``, which builds a new list on each call."""
    lines = [f"{INDENT}def get_subscriptions(self) -> list[{RUNTIME_ALIAS}.EventType]:"]
    if events:
        lines.append(f"{INDENT * 2}return [")
        lines.extend(f"{INDENT * 3}{RUNTIME_ALIAS}.EventType.{event}," for event in events)
        lines.append(f"{INDENT * 2}]")
    else:
        lines.append(f"{INDENT * 2}return []")

    logger.debug(f"Emitted PluginSubscriptions implementation for {type_name}: {list(events)}")
    return ImplBlock(
        interface="PluginSubscriptions",
        lines=lines,
    )


class SubscriptionUnit(GenerationUnit):
    """Generates ``PluginSubscriptions`` from ``@handler`` / ``@subscriptions(...)``."""

    name = "subscriptions"
    interface = "PluginSubscriptions"

    def applies_to(self, decl: Declaration) -> bool:
        return decl.has_marker(HANDLER_MARKER) or decl.has_marker(SUBSCRIPTIONS_MARKER)

    def parse(self, decl: Declaration) -> Tuple[str, ...]:
        return parse_subscriptions(decl)

    def validate(self, decl: Declaration, parsed: Tuple[str, ...]) -> Tuple[str, ...]:
        # Event names are not checked against EventType here; an unknown name
        # fails when get_subscriptions() is called on the generated class.
        return parsed

    def emit(self, decl: Declaration, validated: Tuple[str, ...]) -> ImplBlock:
        return emit_subscriptions(validated, decl.name)
