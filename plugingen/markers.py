"""Annotation decorators read by the generator.

At runtime these do nothing: they hand the decorated class back unchanged.
The generator reads them from source text and emits the implementations.
"""


def plugin(**fields):
    """Declare the plugin descriptor, e.g. ``@plugin(id="x", name="X", version="1.0.0", api="1.0.0")``."""

    def decorate(cls):
        return cls

    return decorate


def subscriptions(*events):
    """Declare the event kinds a handler subscribes to, e.g. ``@subscriptions(Chat, PlayerJoin)``."""

    def decorate(cls):
        return cls

    return decorate


def handler(cls):
    """Mark a class as an event handler; requires ``@subscriptions(...)``."""
    return cls
