from __future__ import annotations


class BridgeError(Exception):
    """Base class for errors synthesized by :mod:`callbridge` itself.

    Errors delivered through a resumer are never wrapped in this type; they
    propagate to the awaiting caller unchanged.
    """


class MissingResultError(BridgeError):
    """A ``(value, error)`` completion arrived with neither side present."""

    def __init__(self, label: str) -> None:
        super().__init__(f"completion handler for {label!r} received neither value nor error")
        self.label = label


class MisuseFault(BridgeError, RuntimeError):
    """Raised to whoever invokes an already-settled resumer in strict mode."""

    def __init__(self, label: str, kind: str) -> None:
        super().__init__(f"resumer for {label!r} misused: {kind}")
        self.label = label
        self.kind = kind


__all__ = ["BridgeError", "MissingResultError", "MisuseFault"]
