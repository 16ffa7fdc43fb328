from __future__ import annotations

import re

from fitsync.models import Action, PlannedAction


SPACE_COLUMN_WIDTH = 12

_UNITS = ["bytes", "KB", "MB", "GB"]

_ACTION_DESCRIPTIONS = {
    Action.KEEP: "keep (only in target)",
    Action.CREATE: "create",
    Action.SAME_SIZE: "skip (same size)",
    Action.NEWER_IN_TARGET: "skip (newer in target)",
    Action.REPLACE: "replace",
    Action.TOO_OLD_SKIP: "skip (too old to fit)",
    Action.DELETE: "delete",
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$")

_SIZE_MULTIPLIERS = {
    "": 1,
    "b": 1,
    "byte": 1,
    "bytes": 1,
    "k": 1000,
    "kb": 1000,
    "m": 1000**2,
    "mb": 1000**2,
    "g": 1000**3,
    "gb": 1000**3,
    "t": 1000**4,
    "tb": 1000**4,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
}


def format_space(n: int) -> str:
    """Render a signed byte count with 1000-based units.

    >>> format_space(999)
    '999 bytes'
    >>> format_space(-1500000)
    '-1.5 MB'
    >>> format_space(0)
    ''
    """
    if n == 0:
        return ""
    sign = "-" if n < 0 else ""
    value = float(abs(n))
    index = 0
    while round(value, 1) >= 1000 and index < len(_UNITS) - 1:
        value /= 1000
        index += 1
    if index == 0:
        return f"{sign}{abs(n)} {_UNITS[0]}"
    return f"{sign}{value:.1f} {_UNITS[index]}"


def describe_action(action: Action) -> str:
    return _ACTION_DESCRIPTIONS[action]


def format_plan_line(planned: PlannedAction) -> str:
    space = format_space(planned.space_effect)
    return f"[{space:>{SPACE_COLUMN_WIDTH}}] {describe_action(planned.action)} {planned.path}"


def parse_size(text: str | int) -> int:
    """Parse a byte count such as ``1024``, ``"500MB"`` or ``"1.5 GiB"``."""
    if isinstance(text, bool):
        raise ValueError(f"Invalid size: {text!r}")
    if isinstance(text, int):
        if text < 0:
            raise ValueError(f"Size must not be negative: {text}")
        return text

    match = _SIZE_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid size: {text!r}")
    number, unit = match.groups()
    multiplier = _SIZE_MULTIPLIERS.get(unit.lower())
    if multiplier is None:
        raise ValueError(f"Unknown size unit {unit!r} in {text!r}")
    return int(float(number) * multiplier)
