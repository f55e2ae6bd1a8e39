"""Text, Markdown and JSON renderings of trainer diagnostics.

This module renders gradient-check reports and training summaries. The
plain-text forms are what the trainer prints when ``display`` is on; the
Markdown and dict forms are for reports and logs written by callers.
"""

from __future__ import annotations

from typing import Any

from core.logging import format_value
from core.types import EvaluationCounters, GradientCheckReport, TrainerConfig

__all__ = [
    "render_gradient_check",
    "render_gradient_check_markdown",
    "gradient_check_to_dict",
    "render_summary",
    "summary_to_dict",
]

_RULE_WIDTH = 48


def render_gradient_check(report: GradientCheckReport) -> str:
    """Render a gradient check as a plain-text table.

    Each row shows the parameter index, an ``x`` marker for masked-out
    parameters, then the numeric gradient, analytic gradient and absolute
    difference.
    """
    lines = [
        "=" * _RULE_WIDTH,
        "GRADCHECK",
        "        Delta, Analytic, Diff",
        "-" * _RULE_WIDTH,
    ]
    for entry in report.entries:
        marker = "x" if entry.masked else " "
        lines.append(
            f"#{entry.index} {marker} {format_value(entry.numeric)}, "
            f"{format_value(entry.analytic)}, {format_value(entry.difference)}"
        )
    lines.append("=" * _RULE_WIDTH)
    return "\n".join(lines)


def render_gradient_check_markdown(report: GradientCheckReport) -> str:
    """Render a gradient check as a Markdown table."""
    lines = [
        "## Gradient check",
        "",
        "| # | masked | numeric | analytic | diff |",
        "|---|--------|---------|----------|------|",
    ]
    for entry in report.entries:
        masked = "x" if entry.masked else ""
        lines.append(
            f"| {entry.index} | {masked} | {entry.numeric:.6e} | "
            f"{entry.analytic:.6e} | {entry.difference:.6e} |"
        )
    lines.append("")
    lines.append(f"**Max difference**: {report.max_difference:.6e}")
    return "\n".join(lines)


def gradient_check_to_dict(report: GradientCheckReport) -> dict[str, Any]:
    """Convert a gradient check to a JSON-serializable dictionary."""
    return {
        "max_difference": report.max_difference,
        "entries": [
            {
                "index": entry.index,
                "masked": entry.masked,
                "numeric": entry.numeric,
                "analytic": entry.analytic,
                "difference": entry.difference,
            }
            for entry in report.entries
        ],
    }


def render_summary(
    algorithm_name: str,
    config: TrainerConfig,
    counters: EvaluationCounters,
) -> str:
    """Render the training summary block."""
    rows = [
        ("Training summary", algorithm_name),
        None,
        ("Error tolerance", format_value(config.error_tolerance)),
        ("Parameter tolerance", format_value(config.parameter_tolerance)),
        ("Function evaluations", str(counters.function_evaluations)),
        ("Gradient evaluations", str(counters.gradient_evaluations)),
        ("Function value", format_value(counters.function_value)),
    ]
    lines = ["=" * _RULE_WIDTH]
    for row in rows:
        if row is None:
            lines.append("-" * _RULE_WIDTH)
            continue
        label, value = row
        lines.append(f"{label:<21}: {value}")
    lines.append("=" * _RULE_WIDTH)
    return "\n".join(lines)


def summary_to_dict(
    algorithm_name: str,
    config: TrainerConfig,
    counters: EvaluationCounters,
) -> dict[str, Any]:
    """Convert the training summary to a JSON-serializable dictionary."""
    return {
        "algorithm": algorithm_name,
        "error_tolerance": config.error_tolerance,
        "parameter_tolerance": config.parameter_tolerance,
        "function_evaluations": counters.function_evaluations,
        "gradient_evaluations": counters.gradient_evaluations,
        "function_value": counters.function_value,
    }
