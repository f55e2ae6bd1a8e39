from __future__ import annotations

import json

from core.types import EvaluationCounters, GradientCheckEntry, GradientCheckReport, TrainerConfig
from trainers.report import (
    gradient_check_to_dict,
    render_gradient_check,
    render_gradient_check_markdown,
    render_summary,
    summary_to_dict,
)


def _report() -> GradientCheckReport:
    return GradientCheckReport(
        entries=(
            GradientCheckEntry(index=0, masked=False, numeric=2.0, analytic=2.5),
            GradientCheckEntry(index=1, masked=True, numeric=0.0, analytic=0.0),
        )
    )


def test_render_gradient_check_marks_masked_rows() -> None:
    lines = render_gradient_check(_report()).splitlines()

    assert lines[1] == "GRADCHECK"
    assert "#0   2, 2.5, 0.5" in lines
    assert "#1 x 0, 0, 0" in lines


def test_render_gradient_check_markdown() -> None:
    text = render_gradient_check_markdown(_report())

    assert text.startswith("## Gradient check")
    assert "| 1 | x |" in text
    assert "**Max difference**: 5.000000e-01" in text


def test_gradient_check_to_dict_is_json_serializable() -> None:
    data = gradient_check_to_dict(_report())

    assert data["max_difference"] == 0.5
    assert data["entries"][1]["masked"] is True
    json.dumps(data)


def test_render_summary() -> None:
    counters = EvaluationCounters(function_evaluations=12, gradient_evaluations=3, function_value=0.125)
    text = render_summary("Line minimiser", TrainerConfig(), counters)

    assert "Training summary     : Line minimiser" in text
    assert "Error tolerance      : 1e-06" in text
    assert "Parameter tolerance  : 0.0001" in text
    assert "Function evaluations : 12" in text
    assert "Gradient evaluations : 3" in text
    assert "Function value       : 0.125" in text


def test_summary_to_dict() -> None:
    counters = EvaluationCounters(function_evaluations=1)
    data = summary_to_dict("Line minimiser", TrainerConfig(), counters)

    assert data["algorithm"] == "Line minimiser"
    assert data["function_evaluations"] == 1
    json.dumps(data)
