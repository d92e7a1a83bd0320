import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from app.core.exceptions import HandlerError

log = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[None]]


class EventDispatcher:
    """
    Routes a recorded event to the async handlers registered for its type.

    One instance per process, created at start-up and handed to whatever
    needs to register. Registrations are not persisted.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def register(self, event_type: str, handler: Handler) -> None:
        """
        Appends handler; handlers for a type run in registration order.
        Only coroutine functions are accepted, a plain callable raises TypeError.
        """
        if not _is_async(handler):
            raise TypeError(f"Handler {_handler_name(handler)} for {event_type} must be an async function")
        self._handlers.setdefault(event_type, []).append(handler)
        log.debug(f"Registered {_handler_name(handler)} for {event_type}")

    def subscribe(self, event_type: str) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(handler: Handler) -> Handler:
            self.register(event_type, handler)
            return handler
        return decorator

    def handlers_for(self, event_type: str) -> Tuple[Handler, ...]:
        return tuple(self._handlers.get(event_type, ()))

    @property
    def event_types(self) -> List[str]:
        return list(self._handlers)

    async def dispatch(self, event_type: str, payload: Dict[str, Any]) -> None:
        """
        Awaits every handler for event_type in order. The first failure stops
        the remaining handlers and is raised as HandlerError.
        An event type nobody subscribed to succeeds as a no-op.
        """
        handlers = self.handlers_for(event_type)
        if not handlers:
            log.debug(f"No handlers registered for {event_type}")
            return

        for handler in handlers:
            try:
                await handler(payload)
            except Exception as e:
                raise HandlerError(event_type, _handler_name(handler), str(e)) from e


def _is_async(handler) -> bool:
    # Also accepts objects whose __call__ is a coroutine function
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(getattr(handler, "__call__", None))


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
