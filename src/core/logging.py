"""Console output for training sessions.

Progress lines are printed with a bracketed tag, e.g. ``[Trainer] ...``,
and flushed immediately so they interleave correctly with model output.
"""

from __future__ import annotations

__all__ = ["log", "format_value"]


def log(msg: str, *, tag: str = "Trainer", enabled: bool = True) -> None:
    """Print a tagged progress line.

    Args:
        msg: Message to print.
        tag: Label shown in brackets before the message.
        enabled: Nothing is printed when False.
    """
    if not enabled:
        return
    print(f"[{tag}] {msg}", flush=True)


def format_value(value: float) -> str:
    """Format a float compactly for progress and report lines."""
    return f"{value:.6g}"
