from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .config import BridgeConfig, get_config, set_config
from .diagnostics import DiagnosticSink, reset_listeners
from .hosts import coroutine, threads
from .hosts._core import resolve_options
from .result import Response
from .resumer import Resumer
from .shapes import (
    OptionalPairShape,
    ResponseShape,
    ResultShape,
    ShapeName,
    ValueShape,
    build_shape,
)

Setup = Callable[[Resumer], Any]


async def bridge(
    setup: Setup,
    /,
    *,
    arity: int = 1,
    label: str | None = None,
    checked: bool | None = None,
    sink: DiagnosticSink | None = None,
) -> Any:
    """Await the first call of a completion handler registered by *setup*.

    *setup* receives a resumer, hands it to a callback-based API and returns
    without blocking. The handler takes *arity* positional values: one value
    is returned as-is, several come back as a tuple, none yields ``None``.

    >>> import asyncio
    >>> async def main() -> int:
    ...     loop = asyncio.get_running_loop()
    ...     return await bridge(lambda done: loop.call_soon(done, 42))
    >>> asyncio.run(main())
    42
    >>> async def pair() -> tuple[str, int]:
    ...     return await bridge(lambda done: done("answer", 42), arity=2)
    >>> asyncio.run(pair())
    ('answer', 42)
    """

    options = resolve_options(label=label, checked=checked, sink=sink)
    return await coroutine.suspend(setup, ValueShape(arity), options)


async def bridge_result(
    setup: Setup,
    /,
    *,
    label: str | None = None,
    checked: bool | None = None,
    sink: DiagnosticSink | None = None,
) -> Any:
    """Await a handler called with a single ``Success`` or ``Failure``.

    >>> import asyncio
    >>> from callbridge import Failure, Success
    >>> async def main() -> str:
    ...     return await bridge_result(lambda done: done(Success("ok")))
    >>> asyncio.run(main())
    'ok'
    >>> async def failing() -> None:
    ...     await bridge_result(lambda done: done(Failure(KeyError("missing"))))
    >>> asyncio.run(failing())
    Traceback (most recent call last):
    ...
    KeyError: 'missing'
    """

    options = resolve_options(label=label, checked=checked, sink=sink)
    return await coroutine.suspend(setup, ResultShape(), options)


async def bridge_optional(
    setup: Setup,
    /,
    *,
    response: Response[Any] | None = None,
    label: str | None = None,
    checked: bool | None = None,
    sink: DiagnosticSink | None = None,
) -> Any:
    """Await a handler called as ``handler(value, error)``.

    A non-``None`` error is raised and the value ignored; otherwise the value
    is returned. When *response* is given it receives the value in every
    case, including when the error is raised.

    >>> import asyncio
    >>> async def main() -> str:
    ...     return await bridge_optional(lambda done: done("body", None))
    >>> asyncio.run(main())
    'body'
    >>> holder = Response()
    >>> async def partial() -> None:
    ...     await bridge_optional(
    ...         lambda done: done("partial", ValueError("truncated")),
    ...         response=holder,
    ...     )
    >>> asyncio.run(partial())
    Traceback (most recent call last):
    ...
    ValueError: truncated
    >>> holder.value
    'partial'
    """

    options = resolve_options(label=label, checked=checked, sink=sink)
    if response is None:
        shape = OptionalPairShape(checked=options.checked)
        return await coroutine.suspend(setup, shape, options)
    value, outcome = await coroutine.suspend(
        setup, ResponseShape(checked=options.checked), options
    )
    response.value = value
    return outcome.unwrap()


def bridge_blocking(
    setup: Setup,
    /,
    *,
    shape: ShapeName = "value",
    arity: int = 1,
    timeout: float | None = None,
    response: Response[Any] | None = None,
    label: str | None = None,
    checked: bool | None = None,
    sink: DiagnosticSink | None = None,
) -> Any:
    """Park the calling thread until the handler registered by *setup* fires.

    *shape* selects how handler arguments are read: ``"value"`` (with
    *arity*), ``"result"`` or ``"optional"``. *response* is only meaningful
    for the ``"optional"`` shape.

    >>> import threading
    >>> def setup(done: Resumer) -> None:
    ...     threading.Timer(0.01, done, args=("late", None)).start()
    >>> bridge_blocking(setup, shape="optional", timeout=5)
    'late'
    """

    options = resolve_options(label=label, checked=checked, sink=sink)
    if shape == "optional" and response is not None:
        value, outcome = threads.suspend(
            setup, ResponseShape(checked=options.checked), options, timeout=timeout
        )
        response.value = value
        return outcome.unwrap()
    payload_shape = build_shape(shape, arity=arity, checked=options.checked)
    return threads.suspend(setup, payload_shape, options, timeout=timeout)


def configure(config: BridgeConfig) -> None:
    """Replace the process-wide bridge configuration.

    >>> configure(BridgeConfig(checked=False))
    >>> current_config().checked
    False
    >>> reset()
    """

    set_config(config)


def current_config() -> BridgeConfig:
    """Return the configuration new bridge calls will use.

    >>> reset()
    >>> isinstance(current_config(), BridgeConfig)
    True
    """

    return get_config()


def reset() -> None:
    """Reload configuration from the environment and drop misuse listeners.

    Use this helper in tests when you need a clean global state.

    >>> reset()
    """

    set_config(None)
    reset_listeners()
