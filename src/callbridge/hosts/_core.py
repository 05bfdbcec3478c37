from __future__ import annotations

import sys
from dataclasses import dataclass

from ..config import get_config
from ..diagnostics import DiagnosticSink, default_sink
from ..resumer import Resumer, make_resumer
from ..shapes import PayloadShape
from ..token import SuspensionToken, Waker


@dataclass(frozen=True, slots=True)
class BridgeOptions:
    label: str
    checked: bool
    strict: bool
    sink: DiagnosticSink


def resolve_options(
    *,
    label: str | None,
    checked: bool | None,
    sink: DiagnosticSink | None,
    depth: int = 2,
) -> BridgeOptions:
    """Merge per-call overrides with the global configuration.

    ``depth`` counts frames above this function; the default resolves the
    caller of the public entry point that called us.
    """

    config = get_config()
    active_checked = config.checked if checked is None else checked
    if label is None:
        label = caller_label(depth) if active_checked else "<unchecked>"
    return BridgeOptions(
        label=label,
        checked=active_checked,
        strict=config.strict,
        sink=sink if sink is not None else default_sink(),
    )


def caller_label(depth: int = 1) -> str:
    """Return the qualified name of the function *depth* frames up."""

    try:
        frame = sys._getframe(depth + 1)
    except ValueError:  # pragma: no cover - stack shallower than expected
        return "<unknown>"
    return frame.f_code.co_qualname


def arm(
    waker: Waker, shape: PayloadShape, options: BridgeOptions
) -> tuple[SuspensionToken, Resumer]:
    token = SuspensionToken(options.label, waker)
    resumer = make_resumer(
        token,
        shape,
        checked=options.checked,
        sink=options.sink,
        strict=options.strict,
    )
    return token, resumer
