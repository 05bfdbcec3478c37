from __future__ import annotations

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any

from .diagnostics import DiagnosticSink, MisuseKind
from .errors import MisuseFault
from .result import Failure, Result, Success
from .shapes import PayloadShape
from .token import SuspensionToken, TokenState

_LOGGER = logging.getLogger("callbridge.resumer")

_MISUSE_BY_STATE: dict[TokenState, MisuseKind] = {
    "resumed": "double_resume",
    "discarded": "resume_after_discard",
}


class Resumer(ABC):
    """One-shot capability handed to a completion-handler API.

    Calling the resumer applies the bridge's payload shape to the positional
    arguments; the ``resume_*`` methods deliver an explicit outcome instead.
    Only the first accepted call reaches the suspended caller. The resumer
    holds the token, never the suspended context, so it may safely outlive the
    bridge call.
    """

    __slots__ = ("_token", "_shape", "__weakref__")

    def __init__(self, token: SuspensionToken, shape: PayloadShape) -> None:
        self._token = token
        self._shape = shape

    @property
    def label(self) -> str:
        return self._token.label

    @property
    def state(self) -> TokenState:
        return self._token.state

    @property
    def settled(self) -> bool:
        return self._token.state != "pending"

    def __call__(self, *args: Any) -> None:
        if self._reject_if_settled():
            return
        self.resume_with(self._shape.normalize(self._token.label, args))

    def resume_returning(self, value: Any = None) -> None:
        self.resume_with(Success(value))

    def resume_raising(self, error: BaseException) -> None:
        if self._reject_if_settled():
            return
        self.resume_with(Failure(error))

    def resume_with(self, result: Result) -> None:
        if not isinstance(result, (Success, Failure)):
            if self._reject_if_settled():
                return
            raise TypeError(f"expected Success or Failure, got {type(result).__name__}")
        previous = self._token.claim(result)
        if previous != "pending":
            self._misused(_MISUSE_BY_STATE[previous])

    def _reject_if_settled(self) -> bool:
        # Settled tokens report the call without validating its payload.
        state = self._token.state
        if state == "pending":
            return False
        self._misused(_MISUSE_BY_STATE[state])
        return True

    @abstractmethod
    def _misused(self, kind: MisuseKind) -> None: ...

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"{type(self).__name__}(label={self.label!r}, state={self.state!r})"


class UncheckedResumer(Resumer):
    """Resumer for callers whose callback discipline is guaranteed elsewhere.

    Extra calls are dropped without a report. That is the whole of the
    unchecked contract: callers must not rely on any particular reaction to
    misuse, only on the first outcome staying intact.
    """

    __slots__ = ()

    def _misused(self, kind: MisuseKind) -> None:
        return None


class CheckedResumer(Resumer):
    """Resumer reporting every misuse to a diagnostic sink."""

    __slots__ = ("_sink", "_strict")

    def __init__(
        self,
        token: SuspensionToken,
        shape: PayloadShape,
        *,
        sink: DiagnosticSink,
        strict: bool = False,
    ) -> None:
        super().__init__(token, shape)
        self._sink = sink
        self._strict = strict
        finalizer = weakref.finalize(self, _report_leak, token, sink)
        finalizer.atexit = False

    def _misused(self, kind: MisuseKind) -> None:
        self._sink.report(self._token.label, kind)
        if self._strict:
            raise MisuseFault(self._token.label, kind)


def _report_leak(token: SuspensionToken, sink: DiagnosticSink) -> None:
    if token.state == "pending":
        _LOGGER.debug("resumer for %r collected while pending", token.label)
        sink.report(token.label, "leaked")


def make_resumer(
    token: SuspensionToken,
    shape: PayloadShape,
    *,
    checked: bool,
    sink: DiagnosticSink,
    strict: bool = False,
) -> Resumer:
    if checked:
        return CheckedResumer(token, shape, sink=sink, strict=strict)
    return UncheckedResumer(token, shape)
