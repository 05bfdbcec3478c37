"""Payload shapes turning a completion handler's arguments into a result.

A single resumer state machine serves every callback signature; the shape
decides how the positional arguments of a completion call map onto
:class:`~callbridge.result.Success` or :class:`~callbridge.result.Failure`.
Shapes validate before the token is claimed, so a malformed call raises
``TypeError`` in the invoking context and leaves the token pending.
"""

from __future__ import annotations

from typing import Any, Literal, Protocol

from .errors import MissingResultError
from .result import Failure, Result, Success

ShapeName = Literal["value", "result", "optional"]


class PayloadShape(Protocol):
    def normalize(self, label: str, args: tuple[Any, ...]) -> Result: ...


class ValueShape:
    """``arity`` positional values, never an error."""

    __slots__ = ("arity",)

    def __init__(self, arity: int = 1) -> None:
        if arity < 0:
            raise ValueError(f"arity must be non-negative, got {arity}")
        self.arity = arity

    def normalize(self, label: str, args: tuple[Any, ...]) -> Result:
        if len(args) != self.arity:
            raise TypeError(
                f"completion handler for {label!r} takes {self.arity} "
                f"positional argument(s) but {len(args)} were given"
            )
        if self.arity == 0:
            return Success(None)
        if self.arity == 1:
            return Success(args[0])
        return Success(args)


class ResultShape:
    """A single :data:`~callbridge.result.Result` argument."""

    __slots__ = ()

    def normalize(self, label: str, args: tuple[Any, ...]) -> Result:
        if len(args) != 1:
            raise TypeError(
                f"result handler for {label!r} takes 1 positional argument "
                f"but {len(args)} were given"
            )
        (outcome,) = args
        if not isinstance(outcome, (Success, Failure)):
            raise TypeError(
                f"result handler for {label!r} expects Success or Failure, "
                f"got {type(outcome).__name__}"
            )
        return outcome


class OptionalPairShape:
    """``(value, error)`` pair where either side may be ``None``.

    The error wins whenever present. With neither side present, checked
    shapes produce :class:`~callbridge.errors.MissingResultError`; unchecked
    shapes resolve to ``None`` and leave the hazard to the caller.
    """

    __slots__ = ("checked",)

    def __init__(self, *, checked: bool = True) -> None:
        self.checked = checked

    def normalize(self, label: str, args: tuple[Any, ...]) -> Result:
        if len(args) != 2:
            raise TypeError(
                f"response handler for {label!r} takes 2 positional arguments "
                f"but {len(args)} were given"
            )
        value, error = args
        if error is not None:
            return Failure(error)
        if value is None and self.checked:
            return Failure(MissingResultError(label))
        return Success(value)


def build_shape(name: ShapeName, *, arity: int = 1, checked: bool = True) -> PayloadShape:
    if name == "value":
        return ValueShape(arity)
    if name == "result":
        return ResultShape()
    if name == "optional":
        return OptionalPairShape(checked=checked)
    raise ValueError(f"unknown payload shape {name!r}. Expected one of: optional, result, value")


class ResponseShape:
    """Optional pair that also hands the raw value back to the caller.

    Resolves to ``Success((value, outcome))`` where ``outcome`` is what
    :class:`OptionalPairShape` would have produced, so the bridge can store
    ``value`` in a :class:`~callbridge.result.Response` before unwrapping.
    """

    __slots__ = ("_pair",)

    def __init__(self, *, checked: bool = True) -> None:
        self._pair = OptionalPairShape(checked=checked)

    def normalize(self, label: str, args: tuple[Any, ...]) -> Result:
        outcome = self._pair.normalize(label, args)
        return Success((args[0], outcome))
