"""Suspension hosts.

Each module pairs the shared token/resumer machinery with one way of parking
the caller: an ``asyncio`` future for coroutines, a ``concurrent.futures``
future for plain threads.
"""

from . import coroutine, threads

__all__ = ["coroutine", "threads"]
