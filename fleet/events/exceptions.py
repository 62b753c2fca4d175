class NoSuchEventError(AttributeError):
    """Raised when an event is not registered on a hub."""


class NoSuchListenerError(ValueError):
    """Raised when removing a handler that was never subscribed."""


class InvalidHandlerError(TypeError):
    """Raised when a handler's signature cannot accept the event's arguments."""
