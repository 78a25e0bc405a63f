"""Game events for the presentation layer."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of game events."""

    # Round flow
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()

    # Cards
    CARD_DEALT = auto()
    SHOE_SHUFFLED = auto()

    # Blackjack actions and outcomes
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_BUSTS = auto()

    # Crash flight
    FLIGHT_STARTED = auto()
    CASHED_OUT = auto()
    CRASHED = auto()

    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """Immutable game event."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]

# Events kept for inspection; older ones are dropped
HISTORY_SIZE = 256


class EventEmitter:
    """
    Event emitter for game events.

    Handlers subscribe to one event type, or to None for every event.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._history: deque[GameEvent] = deque(maxlen=HISTORY_SIZE)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when the event occurs
            event_type: Event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create an event and deliver it to subscribers."""
        event = GameEvent(event_type=event_type, data=data)
        self._history.append(event)

        for handler in self._handlers.get(event_type, []):
            handler(event)
        for handler in self._handlers.get(None, []):
            handler(event)

        return event

    @property
    def history(self) -> list[GameEvent]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
