from typing import Type, Callable, List, Dict, Any
from recompress.domain.events import Event

class EventBus:
    """Synchronous publish/subscribe hub between the pipeline and the console."""

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        self._subscribers.setdefault(event_type, []).append(callback)

    def publish(self, event: Event):
        """Delivers the event to subscribers of its exact type, in subscription order."""
        for callback in list(self._subscribers.get(type(event), [])):
            callback(event)
