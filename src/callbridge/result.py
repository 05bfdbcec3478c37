"""Value-or-error payloads delivered through a resumer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    error: BaseException

    def __post_init__(self) -> None:
        if not isinstance(self.error, BaseException):
            raise TypeError(
                f"Failure expects an exception instance, got {type(self.error).__name__}"
            )

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success[T], Failure]


@dataclass(slots=True)
class Response(Generic[T]):
    """Holder receiving a completion's value even when it also carries an error.

    >>> holder = Response()
    >>> holder.value is None
    True
    """

    value: T | None = None


__all__ = ["Failure", "Response", "Result", "Success"]
