from __future__ import annotations  # LLM-backed argument evaluator with deterministic fallback

import hashlib
import logging
from pathlib import Path
from textwrap import dedent
from typing import Callable, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import LlmRoute, load_config, resolve_route
from llm_gateway import LlmGatewayError, chat
from observability import span
from scoring import DiscussionMode, ScoreSet

logger = logging.getLogger(__name__)

EVALUATOR_KEY = "evaluation.argument_evaluator"

Evaluator = Callable[[str, str, DiscussionMode], ScoreSet]

MOCK_SUMMARIES = [
    "Presents a balanced perspective but lacks depth.",
    "Clear argument with good supporting evidence.",
    "Well-reasoned but could be more relevant to topic.",
    "Strong conviction but needs more logical structure.",
]
MOCK_FACT_CHECK = "Opinion/No explicit facts"
MOCK_ROAST = "Nice try, but even my grandmother argues better than that."


class ArgumentEvaluation(BaseModel):  # Evaluator reply contract
    model_config = ConfigDict(populate_by_name=True)

    logic: float
    clarity: float
    relevance: float
    emotional_bias: float = Field(alias="emotionalBias")
    summary: str = ""
    fact_check: str = Field(default="", alias="factCheck")
    roast: str = ""

    @field_validator("logic", "clarity", "relevance", "emotional_bias")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return min(10.0, max(1.0, float(value)))

    def to_scores(self) -> ScoreSet:
        return ScoreSet(
            logic=self.logic,
            clarity=self.clarity,
            relevance=self.relevance,
            emotional_bias=self.emotional_bias,
            summary=self.summary.strip(),
            fact_check=self.fact_check.strip(),
            roast=self.roast.strip(),
        )


def evaluate_argument(topic: str, transcript: str, mode: DiscussionMode, *, route: LlmRoute) -> ScoreSet:
    """Score one argument; any gateway failure degrades to the deterministic mock."""

    messages = _build_messages(topic, transcript, mode)
    try:
        with span("collaborator.evaluate", route.name, mode=mode.value):
            result = chat(messages, ArgumentEvaluation, cfg=route)
    except LlmGatewayError as exc:
        logger.warning("Argument evaluation failed, using mock scores: %s", exc)
        return mock_evaluation(transcript)
    return result.to_scores()


def mock_evaluation(transcript: str) -> ScoreSet:
    """Stable pseudo-scores derived from the transcript text."""

    digest = hashlib.sha256(transcript.encode("utf-8")).digest()
    return ScoreSet(
        logic=5 + digest[0] % 4,
        clarity=5 + digest[1] % 4,
        relevance=5 + digest[2] % 4,
        emotional_bias=2 + digest[3] % 5,
        summary=MOCK_SUMMARIES[digest[4] % len(MOCK_SUMMARIES)],
        fact_check=MOCK_FACT_CHECK,
        roast=MOCK_ROAST,
    )


def evaluator_with_config(config_path: Path) -> Evaluator:  # Bind the configured route
    route = resolve_route(load_config(config_path), EVALUATOR_KEY)

    def _evaluate(topic: str, transcript: str, mode: DiscussionMode) -> ScoreSet:
        return evaluate_argument(topic, transcript, mode, route=route)

    return _evaluate


def mock_evaluator(topic: str, transcript: str, mode: DiscussionMode) -> ScoreSet:
    return mock_evaluation(transcript)


def _build_messages(topic: str, transcript: str, mode: DiscussionMode) -> List[Dict[str, str]]:
    system = dedent(
        f"""
        You are an impartial discussion evaluator for a {mode.label}.

        Evaluate the following argument based ONLY on how it is presented.
        The argument may be in English, Hindi, or Hinglish (mixed). Evaluate it fairly regardless of language.

        Score each criterion from 1 to 10:
        1. logic: how well-structured and logical the argument is.
        2. clarity: how clearly the idea is expressed.
        3. relevance: how well the argument stays on the given topic.
        4. emotionalBias: how emotional rather than objective the argument is (10 = purely emotional).

        Write the summary STRICTLY IN ENGLISH, whatever language the argument is in.
        factCheck: if the argument makes a verifiable claim, state whether it is True, False, or Unverified;
        otherwise say "Opinion/No explicit facts".
        roast: one funny or brutal sentence about the argument's quality.

        Return only a JSON object with keys logic, clarity, relevance, emotionalBias, summary, factCheck, roast.
        """
    ).strip()
    user = f'Topic: "{topic}"\n\nArgument:\n"{transcript}"'
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


__all__ = [
    "ArgumentEvaluation",
    "EVALUATOR_KEY",
    "Evaluator",
    "evaluate_argument",
    "evaluator_with_config",
    "mock_evaluation",
    "mock_evaluator",
]
