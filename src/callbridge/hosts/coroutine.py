from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ..resumer import Resumer
from ..result import Result
from ..shapes import PayloadShape
from ._core import BridgeOptions, arm

_LOGGER = logging.getLogger("callbridge.hosts.coroutine")


async def suspend(
    setup: Callable[[Resumer], Any],
    shape: PayloadShape,
    options: BridgeOptions,
) -> Any:
    """Run *setup* with a fresh resumer, then await its first outcome.

    The resumer may fire from any thread; delivery is marshalled onto the
    running loop with :meth:`~asyncio.AbstractEventLoop.call_soon_threadsafe`.
    If the awaiting task is cancelled the token is discarded and later calls
    never touch the loop.
    """

    loop = asyncio.get_running_loop()
    future: asyncio.Future[Result] = loop.create_future()

    def _wake(outcome: Result) -> None:
        try:
            loop.call_soon_threadsafe(_deliver, future, outcome)
        except RuntimeError:
            # Loop closed underneath a caller that can no longer observe it.
            _LOGGER.debug("dropping outcome for %r: event loop closed", options.label)

    token, resumer = arm(_wake, shape, options)
    try:
        setup(resumer)
        del resumer
        outcome: Result = await future
        return outcome.unwrap()
    finally:
        token.discard()


def _deliver(future: asyncio.Future[Result], outcome: Result) -> None:
    if future.done():
        # Cancelled between the claim and this callback.
        return
    future.set_result(outcome)
