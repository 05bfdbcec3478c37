from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from ..resumer import Resumer
from ..result import Result
from ..shapes import PayloadShape
from ._core import BridgeOptions, arm


def suspend(
    setup: Callable[[Resumer], Any],
    shape: PayloadShape,
    options: BridgeOptions,
    *,
    timeout: float | None = None,
) -> Any:
    """Run *setup* with a fresh resumer and park the calling thread.

    The thread waits on a :class:`concurrent.futures.Future` carrying the
    first accepted outcome. When *timeout* elapses the token is discarded
    and :class:`TimeoutError` propagates, unless a resumer claimed the token
    first, in which case its outcome is returned.
    """

    future: Future[Result] = Future()
    token, resumer = arm(future.set_result, shape, options)
    try:
        setup(resumer)
        del resumer
        try:
            outcome = future.result(timeout=timeout)
        except TimeoutError:
            if token.discard():
                raise
            # Claimed as the wait expired; the waker is about to publish.
            outcome = future.result()
        return outcome.unwrap()
    finally:
        token.discard()
