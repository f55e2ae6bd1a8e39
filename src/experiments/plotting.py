"""Plotting helpers for training sessions."""

from __future__ import annotations

from pathlib import Path

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from core.types import GradientCheckReport, History  # noqa: E402

__all__ = ["plot_line_search_trace", "plot_gradient_check"]


def plot_line_search_trace(
    history: History,
    out_path: Path,
    *,
    title: str | None = None,
    logy: bool = True,
) -> None:
    """Plot the objective reached by each line minimisation.

    Non-converged searches are marked. Nothing is written for an empty
    history or when no value is plottable.

    Args:
        history: Session history from ModelTrainer.history.
        out_path: Output PNG path.
        title: Optional plot title.
        logy: Use a log scale for the objective (non-positive values dropped).
    """
    values = np.asarray(history.losses(), dtype=np.float64)
    if values.size == 0:
        return
    x = np.arange(1, values.size + 1)
    mask = np.isfinite(values)
    if logy:
        mask &= values > 0
    if not np.any(mask):
        return

    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(8, 4.5))
    plt.plot(x[mask], values[mask], marker="o", label="objective")

    converged = np.asarray(
        [record.metrics.get("converged", 1.0) for record, _meta in history.steps],
        dtype=np.float64,
    )
    stalled = mask & (converged == 0.0)
    if np.any(stalled):
        plt.scatter(x[stalled], values[stalled], color="red", zorder=3, label="not converged")

    plt.xlabel("line search")
    plt.ylabel("objective")
    if logy:
        plt.yscale("log")
    if title:
        plt.title(title)
    plt.legend(loc="best")
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()


def plot_gradient_check(
    report: GradientCheckReport,
    out_path: Path,
    *,
    title: str | None = None,
) -> None:
    """Bar chart of numeric vs analytic gradient per parameter.

    Masked-out parameters are drawn greyed at zero.
    """
    if len(report) == 0:
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)

    idx = np.asarray([entry.index for entry in report.entries])
    numeric = np.asarray([entry.numeric for entry in report.entries], dtype=np.float64)
    analytic = np.asarray([entry.analytic for entry in report.entries], dtype=np.float64)
    masked = np.asarray([entry.masked for entry in report.entries], dtype=bool)

    width = 0.4
    plt.figure(figsize=(8, 4.5))
    plt.bar(idx - width / 2, numeric, width=width, label="numeric")
    plt.bar(idx + width / 2, analytic, width=width, label="analytic")
    for i in idx[masked]:
        plt.axvspan(i - 0.5, i + 0.5, color="grey", alpha=0.2)

    plt.xlabel("parameter")
    plt.ylabel("gradient")
    plt.title(title or f"Gradient check (max diff {report.max_difference:.3g})")
    plt.legend(loc="best")
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()
