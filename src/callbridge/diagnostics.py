from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock, current_thread
from typing import Any, Literal, Protocol

from .config import get_config

MisuseKind = Literal["double_resume", "resume_after_discard", "leaked"]

_LOGGER = logging.getLogger("callbridge.diagnostics")


@dataclass(frozen=True, slots=True)
class MisuseReport:
    label: str
    kind: MisuseKind
    thread_name: str = field(default_factory=lambda: current_thread().name)

    def as_dict(self) -> dict[str, Any]:
        """Represent the report as plain data for logging or testing."""

        return {
            "label": self.label,
            "kind": self.kind,
            "thread_name": self.thread_name,
        }


class DiagnosticSink(Protocol):
    """Anything able to receive misuse reports for a labelled call site."""

    def report(self, label: str, kind: MisuseKind) -> None: ...


class LoggingSink:
    """Sink writing each report to a :class:`logging.Logger`."""

    def __init__(self, logger: logging.Logger | None = None, level: int | None = None) -> None:
        self._logger = logger or _LOGGER
        self._level = level

    def report(self, label: str, kind: MisuseKind) -> None:
        level = self._level if self._level is not None else get_config().report_level
        self._logger.log(level, "resumer misuse kind=%s label=%s", kind, label)


class Diagnostics:
    """Fan misuse reports out to the log and to registered listeners."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._log_sink = LoggingSink(logger)
        self._listeners: list[Callable[[MisuseReport], None]] = []
        self._lock = Lock()

    def report(self, label: str, kind: MisuseKind) -> None:
        self._log_sink.report(label, kind)
        report = MisuseReport(label=label, kind=kind)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(report)

    def add_listener(self, listener: Callable[[MisuseReport], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[MisuseReport], None]) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:  # pragma: no cover - listener not registered
                pass

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()


_GLOBAL_DIAGNOSTICS = Diagnostics()


def default_sink() -> DiagnosticSink:
    return _GLOBAL_DIAGNOSTICS


def add_misuse_listener(listener: Callable[[MisuseReport], None]) -> None:
    """Register a callback invoked for every misuse reported to the global hub."""

    _GLOBAL_DIAGNOSTICS.add_listener(listener)


def remove_misuse_listener(listener: Callable[[MisuseReport], None]) -> None:
    """Remove a previously registered misuse listener."""

    _GLOBAL_DIAGNOSTICS.remove_listener(listener)


def reset_listeners() -> None:
    _GLOBAL_DIAGNOSTICS.clear()


@contextmanager
def observe_misuse(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
) -> Iterator[None]:
    """Context manager that logs misuse reports to *logger* during its scope."""

    active_logger = logger or logging.getLogger("callbridge.observe")

    def _listener(report: MisuseReport) -> None:
        active_logger.log(
            level,
            "resumer misuse kind=%s label=%s thread=%s",
            report.kind,
            report.label,
            report.thread_name,
        )

    add_misuse_listener(_listener)
    try:
        yield
    finally:
        remove_misuse_listener(_listener)


@contextmanager
def capture_misuse() -> Iterator[list[MisuseReport]]:
    """Collect misuse reports emitted during the scope into a list.

    >>> with capture_misuse() as reports:
    ...     default_sink().report("example", "double_resume")
    >>> [report.kind for report in reports]
    ['double_resume']
    """

    reports: list[MisuseReport] = []
    add_misuse_listener(reports.append)
    try:
        yield reports
    finally:
        remove_misuse_listener(reports.append)
