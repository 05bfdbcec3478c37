from __future__ import annotations

from collections.abc import Callable
from threading import Lock
from typing import Literal, cast

from .result import Result

TokenState = Literal["pending", "resumed", "discarded"]
Waker = Callable[[Result], None]


class SuspensionToken:
    """One suspend/resume cycle.

    The token starts ``pending`` and settles exactly once, either ``resumed``
    by the first accepted payload or ``discarded`` when the bridge call stops
    waiting. Both settled states are terminal. The waker is dropped when the
    token settles so a late resumer never reaches the suspended context.
    """

    __slots__ = ("_lock", "_state", "_waker", "label")

    def __init__(self, label: str, waker: Waker) -> None:
        self._lock = Lock()
        self._state: TokenState = "pending"
        self._waker: Waker | None = waker
        self.label = label

    @property
    def state(self) -> TokenState:
        with self._lock:
            return self._state

    def claim(self, outcome: Result) -> TokenState:
        """Try the ``pending -> resumed`` transition with *outcome*.

        Returns the state observed before the attempt: ``"pending"`` means the
        caller won and *outcome* was handed to the waker.
        """

        with self._lock:
            previous = self._state
            if previous != "pending":
                return previous
            self._state = "resumed"
            waker, self._waker = self._waker, None
        cast(Waker, waker)(outcome)
        return previous

    def discard(self) -> bool:
        """Settle a still-pending token without a payload."""

        with self._lock:
            if self._state != "pending":
                return False
            self._state = "discarded"
            self._waker = None
            return True

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"SuspensionToken(label={self.label!r}, state={self._state!r})"
