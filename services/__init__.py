"""
Tourney Core Services

Application services for event handling.
"""

from services.event_bus import EventBus

__all__ = ["EventBus"]
