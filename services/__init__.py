"""
Rhyme Racer Services

Application services: event hub, content sources, and the scripted player.
"""

from services.event_bus import EventBus
from services.content import (
    ContentSource,
    ContentUnavailableError,
    JsonContentSource,
    SequenceContentSource,
)

__all__ = [
    "EventBus",
    "ContentSource",
    "ContentUnavailableError",
    "JsonContentSource",
    "SequenceContentSource",
]
