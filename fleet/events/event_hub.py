"""
Event Hub
---------

A hub holds the subscribers for the events on a number of
:class:`~fleet.events.event_list.EventList` subclasses. Events
are emitted synchronously, in the order handlers subscribed.
"""
from collections import defaultdict
from inspect import signature, Parameter
from typing import Callable, Dict, List, Type, Union

from .event_list import EventList
from .exceptions import NoSuchEventError, NoSuchListenerError, InvalidHandlerError


class BoundEvent:
    """
    An event accessed through a hub, which allows the more natural syntax:

    >>> hub.something_happened += handler
    >>> hub.something_happened("argument")
    """

    def __init__(self, hub: 'EventHub', event: Callable):
        self.hub = hub
        self.event = event

    def __call__(self, *args, **kwargs):
        self.hub.emit(self.event, *args, **kwargs)

    def __iadd__(self, handler: Callable):
        self.hub.subscribe(self.event, handler)
        return self

    def __isub__(self, handler: Callable):
        self.hub.unsubscribe(self.event, handler)
        return self


def _arity(function: Callable, skip_self=False):
    """Gets the positional arity of a function, or None if it accepts any number of arguments."""
    parameters = list(signature(function).parameters.values())
    if skip_self and parameters and parameters[0].name == "self":
        parameters = parameters[1:]

    if any(p.kind is Parameter.VAR_POSITIONAL for p in parameters):
        return None

    return len([p for p in parameters if p.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)])


class EventHub:

    def __init__(self, *event_lists: Type[EventList]):
        self._event_lists: List[Type[EventList]] = []
        self._listeners: Dict[Callable, List[Callable]] = defaultdict(list)
        self.add_events(*event_lists)

    def add_events(self, *event_lists: Type[EventList]):
        """Adds more event lists to the hub."""
        for event_list in event_lists:
            if event_list not in self._event_lists:
                self._event_lists.append(event_list)

    def subscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Subscribes a handler to an event.

        :raises NoSuchEventError: If the event is not on this hub.
        :raises InvalidHandlerError: If the handler does not accept the event's arguments.
        """
        event = self._resolve(event)
        expected, actual = _arity(event, skip_self=True), _arity(handler)
        if actual is not None and expected != actual:
            raise InvalidHandlerError(
                f"Handler {handler.__name__} takes {actual} arguments but {event.__name__} sends {expected}."
            )
        self._listeners[event].append(handler)

    def unsubscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Removes a handler from an event.

        :raises NoSuchListenerError: If the handler is not subscribed.
        """
        if isinstance(event, BoundEvent):
            event = event.event

        try:
            self._listeners[event].remove(handler)
        except ValueError:
            raise NoSuchListenerError(f"{handler} is not subscribed to {event.__name__}.")

    def emit(self, event: Union[Callable, BoundEvent], *args, **kwargs):
        """Calls every handler subscribed to the event."""
        event = self._resolve(event)
        for handler in list(self._listeners[event]):
            handler(*args, **kwargs)

    def _resolve(self, event: Union[Callable, BoundEvent]) -> Callable:
        if isinstance(event, BoundEvent):
            event = event.event
        if event not in self:
            raise NoSuchEventError(f"{getattr(event, '__name__', event)} is not an event on this hub.")
        return event

    def __contains__(self, item):
        if isinstance(item, type) and issubclass(item, EventList):
            return item in self._event_lists
        return any(item in event_list for event_list in self._event_lists)

    def __getattr__(self, name) -> BoundEvent:
        if name.startswith("_"):
            raise AttributeError(name)

        for event_list in self._event_lists:
            event = getattr(event_list, name, None)
            if event is not None and callable(event):
                return BoundEvent(self, event)

        raise NoSuchEventError(f"There is no event {name} on this hub.")

    def __setattr__(self, name, value):
        # ``hub.event += handler`` assigns the bound event back to the hub
        if isinstance(value, BoundEvent) and value.hub is self:
            return
        super().__setattr__(name, value)
