"""Event kinds as bare names, for use inside ``@subscriptions(...)``.

    from plugingen.events import Chat, PlayerJoin
"""

from plugingen.interfaces import EventType

globals().update(EventType.__members__)

__all__ = list(EventType.__members__)
