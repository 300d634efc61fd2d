"""Tests for the subscription unit."""

import ast
import logging
import textwrap
from pathlib import Path

import pytest

from plugingen import interfaces
from plugingen.declarations import DeclarationKind, collect_declarations
from plugingen.diagnostics import ErrorKind, GenerationError
from plugingen.interfaces import EventType
from plugingen.subscriptions import SubscriptionUnit, emit_subscriptions, parse_subscriptions

PATH = Path("handlers.py")


def declaration(source: str):
    return collect_declarations(ast.parse(textwrap.dedent(source)), PATH)[0]


def parse_error(source: str) -> GenerationError:
    with pytest.raises(GenerationError) as exc_info:
        parse_subscriptions(declaration(source))
    return exc_info.value


def build_instance(block):
    namespace = {"_runtime": interfaces}
    exec("class Generated:\n" + block.render() + "\n", namespace)
    return namespace["Generated"]()


class TestParseSubscriptions:
    """Tests for parse_subscriptions."""

    def test_order_and_duplicates_preserved(self):
        decl = declaration("@subscriptions(Chat, PlayerJoin, Chat)\nclass Greeter:\n    pass\n")

        assert parse_subscriptions(decl) == ("Chat", "PlayerJoin", "Chat")

    def test_empty_list(self):
        decl = declaration("@subscriptions()\nclass Greeter:\n    pass\n")

        assert parse_subscriptions(decl) == ()

    def test_handler_with_subscriptions(self):
        source = """
        @handler
        @subscriptions(
            PlayerQuit,
            Command,
        )
        class Greeter:
            greeting: str = "hi"
        """
        assert parse_subscriptions(declaration(source)) == ("PlayerQuit", "Command")

    def test_unknown_event_names_pass_through(self):
        """Names are not checked against EventType here."""
        decl = declaration("@subscriptions(Chta, NotAnEvent)\nclass Greeter:\n    pass\n")

        assert parse_subscriptions(decl) == ("Chta", "NotAnEvent")

    def test_handler_without_subscriptions(self):
        error = parse_error("@handler\nclass Greeter:\n    pass\n")

        assert error.kind == ErrorKind.MISSING_SUBSCRIPTIONS_ANNOTATION
        assert "@subscriptions(Chat, PlayerJoin)" in error.diagnostic.message
        assert error.diagnostic.location.line == 2

    @pytest.mark.parametrize(
        "source",
        [
            "@subscriptions(Chat)\ndef greeter():\n    pass\n",
            "@subscriptions(Chat)\nasync def greeter():\n    pass\n",
            "@subscriptions(Chat)\nclass Color(Enum):\n    RED = 1\n",
            "@handler\nclass Color(enum.IntEnum):\n    RED = 1\n",
        ],
    )
    def test_non_struct_declaration_rejected(self, source):
        error = parse_error(source)

        assert error.kind == ErrorKind.UNSUPPORTED_DECLARATION_KIND

    def test_declaration_kind_checked_before_annotation(self):
        error = parse_error("@handler\ndef greeter():\n    pass\n")

        assert error.kind == ErrorKind.UNSUPPORTED_DECLARATION_KIND

    def test_bare_subscriptions_is_malformed(self):
        error = parse_error("@subscriptions\nclass Greeter:\n    pass\n")

        assert error.kind == ErrorKind.MALFORMED_EVENT_TOKEN

    @pytest.mark.parametrize(
        "token",
        ["EventType.Chat", '"Chat"', "event=Chat", "*events", "Chat()", "1"],
    )
    def test_malformed_token(self, token):
        error = parse_error(f"@subscriptions(PlayerJoin, {token})\nclass Greeter:\n    pass\n")

        assert error.kind == ErrorKind.MALFORMED_EVENT_TOKEN

    def test_malformed_token_location(self):
        line = "@subscriptions(Chat, types.PlayerJoin)"

        error = parse_error(f"{line}\nclass Greeter:\n    pass\n")

        assert error.diagnostic.location.line == 1
        assert error.diagnostic.location.column == line.index("types") + 1
        assert "types.PlayerJoin" in error.diagnostic.message

    def test_first_of_several_annotations_wins(self, caplog):
        decl = declaration("@subscriptions(Chat)\n@subscriptions(PlayerJoin)\nclass Greeter:\n    pass\n")

        with caplog.at_level(logging.WARNING, logger="plugingen.subscriptions"):
            events = parse_subscriptions(decl)

        assert events == ("Chat",)
        assert "using the first" in caplog.text


class TestEmitSubscriptions:
    """Tests for emit_subscriptions."""

    def test_returns_events_in_order(self):
        instance = build_instance(emit_subscriptions(("Chat", "PlayerJoin", "Chat"), "Greeter"))

        assert instance.get_subscriptions() == [EventType.Chat, EventType.PlayerJoin, EventType.Chat]

    def test_empty(self):
        instance = build_instance(emit_subscriptions((), "Greeter"))

        assert instance.get_subscriptions() == []

    def test_each_call_returns_new_list(self):
        instance = build_instance(emit_subscriptions(("Chat",), "Greeter"))

        first = instance.get_subscriptions()
        first.append(EventType.WorldClose)
        second = instance.get_subscriptions()

        assert first is not second
        assert second == [EventType.Chat]

    def test_block_metadata(self):
        block = emit_subscriptions(("Chat",), "Greeter")

        assert block.interface == "PluginSubscriptions"
        assert "            _runtime.EventType.Chat," in block.lines


class TestSubscriptionUnit:
    """Tests for SubscriptionUnit."""

    @pytest.mark.parametrize(
        "source,applies",
        [
            ("@handler\nclass A:\n    pass\n", True),
            ("@subscriptions(Chat)\nclass A:\n    pass\n", True),
            ('@plugin(id="a")\nclass A:\n    pass\n', False),
        ],
    )
    def test_applies_to(self, source, applies):
        assert SubscriptionUnit().applies_to(declaration(source)) is applies

    def test_pipeline(self):
        decl = declaration("@handler\n@subscriptions(Chat, Chat)\nclass Greeter:\n    pass\n")
        unit = SubscriptionUnit()

        block = unit.emit(decl, unit.validate(decl, unit.parse(decl)))

        assert build_instance(block).get_subscriptions() == [EventType.Chat, EventType.Chat]

    def test_declaration_kind(self):
        assert declaration("@handler\nclass A(Base):\n    pass\n").kind == DeclarationKind.CLASS
        assert declaration("@handler\nclass A(Enum):\n    X = 1\n").kind == DeclarationKind.ENUM
        assert declaration("@handler\ndef a():\n    pass\n").kind == DeclarationKind.FUNCTION
