"""Host-bound control messages and the one-way message channel.

Native functions run inside a plugin's Lua context and have no direct
access to the host loop. Instead each handler receives a
:class:`MessageSender` and pushes :class:`Message` instances onto it; the
host drains the matching :class:`MessageReceiver` between update cycles.

Messages form an open hierarchy. :class:`ExitRequest` is the only variant
the stock host acts on; new variants are added by subclassing
:class:`Message`, and consumers ignore variants they do not recognise.

Example::

    sender, receiver = channel()
    sender.send(ExitRequest(True))
    for message in receiver.drain():
        ...
"""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class Message:
    """Base class for all messages sent from native handlers to the host."""


@dataclass(frozen=True)
class ExitRequest(Message):
    """Ask the host to stop its control loop after the current cycle.

    Attributes:
        terminate: ``True`` to stop; ``False`` is delivered but has no effect.
    """

    terminate: bool = True


class MessageSender:
    """Sending half of a channel. Sends never block."""

    def __init__(self, q: "queue.SimpleQueue[Message]") -> None:
        self._queue = q

    def send(self, message: Message) -> None:
        """Queue *message* for the host."""
        self._queue.put_nowait(message)

    def clone(self) -> "MessageSender":
        """Return another sender feeding the same receiver."""
        return MessageSender(self._queue)


class MessageReceiver:
    """Receiving half of a channel, owned by the host loop."""

    def __init__(self, q: "queue.SimpleQueue[Message]") -> None:
        self._queue = q

    def try_recv(self) -> Optional[Message]:
        """Return the next pending message, or ``None`` if there is none."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> Iterator[Message]:
        """Yield every message pending at the time of iteration, without blocking."""
        while True:
            message = self.try_recv()
            if message is None:
                return
            yield message


def channel() -> tuple[MessageSender, MessageReceiver]:
    """Create a connected ``(sender, receiver)`` pair."""
    q: "queue.SimpleQueue[Message]" = queue.SimpleQueue()
    return MessageSender(q), MessageReceiver(q)
