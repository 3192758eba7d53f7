"""Argument evaluation against the AI evaluator route."""
from .argument_evaluator import (
    EVALUATOR_KEY,
    ArgumentEvaluation,
    Evaluator,
    evaluate_argument,
    evaluator_with_config,
    mock_evaluation,
    mock_evaluator,
)

__all__ = [
    "EVALUATOR_KEY",
    "ArgumentEvaluation",
    "Evaluator",
    "evaluate_argument",
    "evaluator_with_config",
    "mock_evaluation",
    "mock_evaluator",
]
