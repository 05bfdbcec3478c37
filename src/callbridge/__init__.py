"""Turn completion-handler callbacks into a single awaitable call.

`callbridge` hands a callback-based API a one-shot *resumer* and suspends the
caller until that resumer fires. Only the first call is delivered; later
calls are reported as misuse rather than allowed to corrupt the outcome.
See :mod:`callbridge.api` for the entry points.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import (
    bridge,
    bridge_blocking,
    bridge_optional,
    bridge_result,
    configure,
    current_config,
    reset,
)
from .config import BridgeConfig
from .diagnostics import (
    DiagnosticSink,
    LoggingSink,
    MisuseKind,
    MisuseReport,
    add_misuse_listener,
    capture_misuse,
    observe_misuse,
    remove_misuse_listener,
)
from .errors import BridgeError, MissingResultError, MisuseFault
from .result import Failure, Response, Result, Success
from .resumer import CheckedResumer, Resumer, UncheckedResumer

__all__ = [
    "BridgeConfig",
    "BridgeError",
    "CheckedResumer",
    "DiagnosticSink",
    "Failure",
    "LoggingSink",
    "MissingResultError",
    "MisuseFault",
    "MisuseKind",
    "MisuseReport",
    "Response",
    "Result",
    "Resumer",
    "Success",
    "UncheckedResumer",
    "add_misuse_listener",
    "bridge",
    "bridge_blocking",
    "bridge_optional",
    "bridge_result",
    "capture_misuse",
    "configure",
    "current_config",
    "observe_misuse",
    "remove_misuse_listener",
    "reset",
]

try:
    __version__ = version("callbridge")
except PackageNotFoundError:  # pragma: no cover - during local dev
    __version__ = "0.0.0"
