"""Trainers module.

This package contains the ModelTrainer, which wraps an Optimisable model
with evaluation counting, masking, line minimisation and gradient checks,
and the renderers for its diagnostics.
"""

from __future__ import annotations

from trainers.model_trainer import ModelTrainer
from trainers.report import (
    gradient_check_to_dict,
    render_gradient_check,
    render_gradient_check_markdown,
    render_summary,
    summary_to_dict,
)

__all__ = [
    "ModelTrainer",
    "render_gradient_check",
    "render_gradient_check_markdown",
    "gradient_check_to_dict",
    "render_summary",
    "summary_to_dict",
]
