class StorageError(Exception):
    """The event record store could not durably append, read or update."""


class HandlerError(Exception):
    """A registered handler failed while handling an event."""

    def __init__(self, event_type: str, handler_name: str, message: str):
        super().__init__(f"Handler {handler_name} failed for {event_type}: {message}")
        self.event_type = event_type
        self.handler_name = handler_name


class FruitValidationError(ValueError):
    """Input rejected by the fruit storage rules."""


class FruitNotFoundError(LookupError):
    pass


class FruitConflictError(Exception):
    pass
