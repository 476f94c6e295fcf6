"""
Message Bus

Routes committed domain events to their subscribers (notifications,
audit hooks). A subscriber can never undo or fail the operation that
produced the event: its errors are logged and the next subscriber runs.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


def _handler_name(handler) -> str:
    return getattr(handler, '__qualname__', None) or repr(handler)


class MessageBus:
    """Event type -> ordered subscribers (1:N)"""

    def __init__(self):
        self._subscribers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe handler to event_type; subscribing it again is a no-op"""
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{_handler_name(handler)} subscribed to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            subscribers = self.handlers_for(type(event))
            if not subscribers:
                logger.debug(f"Nobody subscribed to {type(event).__name__}")
                continue

            logger.info(f"Publishing {type(event).__name__} {event.event_id} to {len(subscribers)} subscriber(s)")
            for handler in subscribers:
                self._dispatch(handler, event)

    @staticmethod
    def _dispatch(handler: EventHandler, event: DomainEvent):
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"{_handler_name(handler)} failed on {type(event).__name__} {event.event_id}: {e}",
                exc_info=True
            )


# Process-wide bus; notifications subscribe to it in NotificationsConfig.ready()
message_bus = MessageBus()
