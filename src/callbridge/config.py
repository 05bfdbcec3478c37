from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from threading import Lock

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    """Process-wide settings applied when a bridge call builds its resumer.

    ``checked`` selects the misuse mode for calls that do not pass their own
    ``checked=`` argument. ``strict`` additionally raises
    :class:`~callbridge.errors.MisuseFault` to whoever invokes a settled
    resumer. ``report_level`` is the logging level used for misuse reports.
    """

    checked: bool = True
    strict: bool = False
    report_level: int = logging.WARNING

    @classmethod
    def from_env(cls) -> BridgeConfig:
        """Build a config from ``CALLBRIDGE_*`` variables.

        Unset or unparseable variables keep the dataclass default:

        ``CALLBRIDGE_CHECKED``
            Boolean flag (``1``/``true``/``yes``) enabling misuse detection.
        ``CALLBRIDGE_STRICT``
            Boolean flag making misuse raise in the invoking context.
        ``CALLBRIDGE_REPORT_LEVEL``
            Logging level name (``warning``, ``error``...) or integer.
        """

        env = os.environ

        def _flag(name: str, default: bool) -> bool:
            word = env.get(name, "").strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
            return default

        def _parse_level(value: str | None) -> int | None:
            if value is None:
                return None
            stripped = value.strip()
            if stripped.isdigit():
                return int(stripped)
            level = logging.getLevelName(stripped.upper())
            return level if isinstance(level, int) else None

        checked = _flag("CALLBRIDGE_CHECKED", True)
        strict = _flag("CALLBRIDGE_STRICT", False)
        report_level = _parse_level(env.get("CALLBRIDGE_REPORT_LEVEL"))

        return cls(
            checked=checked,
            strict=strict,
            report_level=report_level if report_level is not None else logging.WARNING,
        )


_CONFIG: BridgeConfig | None = None
_LOCK = Lock()


def get_config() -> BridgeConfig:
    """Return the active configuration, loading it from the environment once."""

    global _CONFIG
    with _LOCK:
        if _CONFIG is None:
            _CONFIG = BridgeConfig.from_env()
        return _CONFIG


def set_config(config: BridgeConfig | None) -> None:
    """Replace the active configuration; ``None`` reloads from the environment."""

    global _CONFIG
    with _LOCK:
        _CONFIG = config
