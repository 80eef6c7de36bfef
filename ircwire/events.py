## events.py
# Fire-and-forget publish/subscribe of parsed messages.
import asyncio
import inspect
import logging

__all__ = ['WILDCARD', 'EventHub']

# Event name that receives every published message.
WILDCARD = '*'


class EventHub:
    """
    Registry of handlers keyed by event name.

    Every handler invocation runs in its own asyncio task: publish() returns before any handler has
    run, handlers never wait on each other, and a handler that raises is logged and otherwise ignored.
    Callers that need to know when a handler finished have to signal that themselves.
    """

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self._handlers = {}
        self._tasks = set()

    @staticmethod
    def normalize(event):
        return str(event).upper()

    def subscribe(self, event, handler):
        """ Register handler for event. Handlers can be coroutine functions or plain callables. """
        if not callable(handler):
            raise TypeError('Handler for {} is not callable: {!r}'.format(event, handler))
        self._handlers.setdefault(self.normalize(event), []).append(handler)

    def unsubscribe(self, event, handler):
        """ Remove a handler registered for event. """
        event = self.normalize(event)
        handlers = self._handlers.get(event, [])
        if handler not in handlers:
            raise ValueError('Handler not registered for {}: {!r}'.format(event, handler))

        handlers.remove(handler)
        if not handlers:
            del self._handlers[event]

    def handlers(self, event):
        """ Handlers currently registered for event. """
        return list(self._handlers.get(self.normalize(event), []))

    def publish(self, event, message):
        """ Schedule every handler registered for event. Must be called from within a running event loop. """
        event = self.normalize(event)
        loop = asyncio.get_running_loop()

        for handler in self.handlers(event):
            task = loop.create_task(self._invoke(event, handler, message))
            # Keep a reference until the task is done, the loop only keeps weak ones.
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _invoke(self, event, handler, message):
        try:
            result = handler(message)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self.logger.exception('Failed to execute %s handler %r.', event, handler)

    @property
    def pending(self):
        """ Amount of handler invocations that have not finished yet. """
        return len(self._tasks)
