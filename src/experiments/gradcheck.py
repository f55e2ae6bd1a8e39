"""Gradient-check CLI for a training session.

Builds the trainer described by a session JSON file, compares analytic and
central-difference gradients at the model's current parameters, and writes
the report (plus an optional plot).

Usage:
    python -m experiments.gradcheck session.json
    python -m experiments.gradcheck session.json --override trainer.epsilon=1e-5
    python -m experiments.gradcheck session.json --tolerance 1e-6 --plot gradcheck.png
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from experiments.config import load_session
from experiments.plotting import plot_gradient_check
from trainers.report import (
    gradient_check_to_dict,
    render_gradient_check,
    render_gradient_check_markdown,
)

__all__ = ["main", "parse_args"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Compare analytic and numerical gradients of a model.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("session", type=Path, help="Session JSON file")
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        help="Dotted key=value override applied to the session spec (repeatable)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-4,
        help="Maximum allowed absolute difference",
    )
    parser.add_argument(
        "--format",
        choices=["text", "markdown", "json"],
        default="text",
        help="Report format",
    )
    parser.add_argument("--plot", type=Path, default=None, help="Write a bar chart to this PNG")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 if every gradient agrees within tolerance, 2 otherwise).
    """
    args = parse_args(argv)
    # The report is printed below, so the trainer's own table is suppressed
    trainer = load_session(args.session, ["trainer.display=false", *args.override])
    report = trainer.check_gradient()

    if args.format == "json":
        print(json.dumps(gradient_check_to_dict(report), indent=2))
    elif args.format == "markdown":
        print(render_gradient_check_markdown(report))
    else:
        print(render_gradient_check(report))

    if args.plot is not None:
        plot_gradient_check(report, args.plot)

    return 0 if report.passed(args.tolerance) else 2


if __name__ == "__main__":
    sys.exit(main())
