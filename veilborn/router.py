# veilborn/router.py

from collections import defaultdict
from typing import Callable, Dict, List, Any


EventHandler = Callable[[str, Dict[str, Any]], None]


class EventRouter:
    """
    Lightweight synchronous event bus.

    - Listeners subscribe to string topics, e.g. "battle.log", "fx.cue".
    - Emit events with a topic + payload dict.
    - Engine-wide: the battle core publishes here, presentation listens.
    - subscribe_all() listeners see every topic (recorders, debug tools).
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventHandler]] = defaultdict(list)
        self._catch_all: List[EventHandler] = []

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        """
        Register a handler for a given topic.

        handler(topic, payload_dict) will be called on emit().
        """
        self._listeners[topic].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Register a handler that receives every emitted topic."""
        self._catch_all.append(handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        if topic in self._listeners:
            self._listeners[topic] = [
                h for h in self._listeners[topic] if h is not handler
            ]
            if not self._listeners[topic]:
                del self._listeners[topic]

    def emit(self, topic: str, **payload: Any) -> None:
        """
        Emit an event. Topic handlers run synchronously in registration
        order, then the catch-all handlers.
        """
        handlers = list(self._listeners.get(topic, []))
        event_data = dict(payload)

        for handler in handlers + self._catch_all:
            handler(topic, event_data)
