"""
Event Bus - Central signal hub for inter-module communication.

The platform layer (chat bot, web UI, ...) connects to this single object
rather than to individual engine components.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for Tourney Core.

    The EventBus acts as a mediator between the engine and its consumers:
    - TournamentBracket forwards progression events
    - Renderers listen and redraw groups and brackets
    - Schedulers listen for newly playable matches

    Usage:
        # Engine side
        bracket = TournamentBracket(event_bus=bus)

        # Platform side
        bus.stage_changed.connect(self._on_stage_changed)
    """

    # ============ Tournament Lifecycle ============
    tournament_created = Signal(dict)       # {name, format, players, groups}
    stage_changed = Signal(str)             # "groups" / "playoffs" / "complete"
    tournament_completed = Signal(dict)     # {champion, runner_up, third_place, ...}

    # ============ Match Lifecycle ============
    match_completed = Signal(dict)          # Match details dict
    group_completed = Signal(str)           # group name
    bracket_updated = Signal()              # bracket slots changed

    # ============ Map Events ============
    map_bans_resolved = Signal(list)        # maps to play, in order

    # ============ System Events ============
    system_message = Signal(str, str)       # (level, message) - e.g., ("info", "Playoffs built")

    def __init__(self):
        super().__init__()

    def emit_message(self, level: str, message: str) -> None:
        """Emit a system message (info, warning, error)."""
        self.system_message.emit(level, message)
