"""Host control loop -- drives the plugin lifecycle.

The :class:`Host` walks a scanned
:class:`~plughost.plugins.manager.PluginManager` through its lifecycle::

    Loaded --init--> Initialized --update*--> Running --destroy--> Terminated

``init()`` is called once; a failure there is logged but does not stop the
host. ``update()`` is then called repeatedly. After every update pass the
host drains the message channel without blocking. The loop ends when a
plugin sends ``ExitRequest(True)``, when an update pass fails, or when the
optional cycle limit is reached; ``destroy()`` is called once at the end.

There is no timeout: a plugin whose ``update()`` never returns stalls the
loop.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from plughost.messages import ExitRequest, Message, MessageReceiver
from plughost.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class HostState(str, Enum):
    """Where the host is in the plugin lifecycle."""

    LOADED = "loaded"
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINATED = "terminated"


class StopReason(str, Enum):
    """Why the update loop ended."""

    EXIT_REQUESTED = "exit_requested"
    UPDATE_FAILED = "update_failed"
    MAX_CYCLES = "max_cycles"


@dataclass
class RunResult:
    """Summary of a completed :meth:`Host.run`.

    Attributes:
        cycles: Number of update passes attempted.
        reason: Why the loop ended.
        init_ok: Whether every plugin's ``init()`` succeeded.
        destroy_ok: Whether every visited plugin's ``destroy()`` succeeded.
    """

    cycles: int
    reason: StopReason
    init_ok: bool
    destroy_ok: bool


class Host:
    """Runs the lifecycle loop over an already scanned manager.

    Args:
        manager: The manager holding the loaded plugins.
        receiver: Receiving half of the channel whose sender the manager's
            native functions use.
        max_cycles: Stop after this many update passes. ``None`` runs until
            a plugin asks to exit or an update fails.
        update_interval: Seconds to sleep after each update pass.
        destroy_all: Call ``destroy()`` on every plugin even after one
            fails, instead of stopping at the first failure.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        manager: PluginManager,
        receiver: MessageReceiver,
        max_cycles: Optional[int] = None,
        update_interval: float = 0.0,
        destroy_all: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.manager = manager
        self.receiver = receiver
        self.max_cycles = max_cycles
        self.update_interval = update_interval
        self.destroy_all = destroy_all
        self._sleep = sleep
        self.state = HostState.LOADED

    def drain_messages(self) -> bool:
        """Handle every pending message.

        Returns:
            ``True`` if a termination request was among them.
        """
        stop = False
        for message in self.receiver.drain():
            if self.handle_message(message):
                stop = True
        return stop

    def handle_message(self, message: Message) -> bool:
        """Act on one message. Returns ``True`` if the loop should stop.

        Unknown message types are ignored.
        """
        if isinstance(message, ExitRequest):
            if message.terminate:
                logger.info("Plugin requested exit")
            return message.terminate
        logger.debug("Ignoring unhandled message %r", message)
        return False

    def run(self) -> RunResult:
        """Run ``init``, the update loop, and ``destroy``.

        Returns:
            A :class:`RunResult` describing how the run went.
        """
        init_ok = self.manager.init()
        if not init_ok:
            logger.warning("One or more plugins failed to initialise")
        self.state = HostState.INITIALIZED

        cycles = 0
        while True:
            if self.max_cycles is not None and cycles >= self.max_cycles:
                reason = StopReason.MAX_CYCLES
                break

            cycles += 1
            self.state = HostState.RUNNING
            if not self.manager.update():
                reason = StopReason.UPDATE_FAILED
                break

            if self.drain_messages():
                reason = StopReason.EXIT_REQUESTED
                break

            if self.update_interval:
                self._sleep(self.update_interval)

        logger.debug("Update loop ended after %d cycle(s): %s", cycles, reason.value)
        destroy_ok = self.manager.destroy(fail_fast=not self.destroy_all)
        self.state = HostState.TERMINATED
        return RunResult(
            cycles=cycles, reason=reason, init_ok=init_ok, destroy_ok=destroy_ok
        )
