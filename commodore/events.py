"""
Commodore events: the per-command behavior registry.

Every Command owns one EventBus. Options, sub-commands and the global
catch-all all route through it:
- an option activation publishes the option's canonical name,
- a matched leading token publishes the child command's name,
- "*" receives every non-empty positional list before routing.

Semantics
- subscribe(name, callback) appends; the same name may be subscribed many times.
- publish(name, payload) runs every listener for that name, synchronously and in
  registration order, and returns how many listeners ran.
- Publishing a name nobody subscribed to is a no-op that returns 0.
- Exceptions raised by a listener propagate to the publisher untouched, so a
  fault raised mid-publish stops the remaining listeners as well.
"""
import logging
from collections import defaultdict

logger = logging.getLogger(__name__)

WILDCARD = "*"


class EventBus:
    """
    Mapping from event name to an ordered list of callbacks.
    """
    __slots__ = ("_listeners",)

    def __init__(self):
        self._listeners = defaultdict(list)

    def subscribe(self, name, callback, /):
        """
        Append a listener for `name` and return the callback (decorator friendly).
        """
        if not isinstance(name, str):
            raise TypeError("event name must be a string")
        if not callable(callback):
            raise TypeError("event listener must be callable")
        self._listeners[name].append(callback)
        return callback

    def publish(self, name, payload=None, /):
        # Snapshot so a listener subscribing during publish does not run in this round.
        listeners = tuple(self._listeners.get(name, ()))
        logger.debug("publish %r to %d listener(s)", name, len(listeners))
        for listener in listeners:
            listener(payload)
        return len(listeners)

    def listeners(self, name, /):
        return tuple(self._listeners.get(name, ()))

    def __contains__(self, name):
        return bool(self._listeners.get(name))

    def __repr__(self):
        return "event-bus(%s)" % ", ".join(
            "%s=%d" % (name, len(listeners)) for name, listeners in self._listeners.items()
        )


__all__ = (
    "EventBus",
    "WILDCARD",
)
