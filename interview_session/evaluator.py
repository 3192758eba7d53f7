from __future__ import annotations  # Interview report evaluation prompts and parsing

import json
import logging
import math
from textwrap import dedent
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from llm_gateway import strip_code_fences

from .models import InterviewSession
from .transcript import build_evaluation_transcript

logger = logging.getLogger(__name__)

SCORE_KEYS = ("clarity", "relevance", "logical_reasoning", "confidence", "depth")


class InterviewScores(BaseModel):
    clarity: int = Field(ge=1, le=10)
    relevance: int = Field(ge=1, le=10)
    logical_reasoning: int = Field(ge=1, le=10)
    confidence: int = Field(ge=1, le=10)
    depth: int = Field(ge=1, le=10)
    overall: float

    @classmethod
    def from_raw(cls, raw: Dict[str, float]) -> "InterviewScores":  # Clamp to 1..10 and derive the overall mean
        values = {key: max(1, min(10, round(float(raw[key])))) for key in SCORE_KEYS}
        overall = round(sum(values.values()) / len(values), 1)
        return cls(overall=overall, **values)


class InterviewEvaluation(BaseModel):
    scores: InterviewScores
    strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)
    overall_feedback: str = ""


def build_evaluation_messages(session: InterviewSession) -> List[Dict[str, str]]:
    transcript = build_evaluation_transcript(session)
    system = dedent(
        f"""
        You are a strict, professional interview evaluator. You will receive a transcript of an interview for the role of "{session.role}" with "{session.focus.value}" focus at "{session.difficulty.value}" difficulty.

        EVALUATION CRITERIA (score each 1-10):
        1. Clarity: How clearly did the candidate articulate their thoughts? Were answers well-structured and easy to follow?
        2. Relevance: Did the candidate answer the actual question asked? Did they stay on topic?
        3. Logical Reasoning: Did the candidate demonstrate sound logic, problem-solving ability, and structured thinking?
        4. Confidence: Did the candidate communicate with conviction? Were answers assertive or vague and hesitant?
        5. Depth: Did the candidate go beyond surface-level answers? Did they show real understanding and experience?

        SCORING GUIDE:
        - 1-3: Poor. Major gaps, off-topic, or incoherent.
        - 4-5: Below average. Partially relevant but lacks substance.
        - 6-7: Competent. Meets expectations with minor gaps.
        - 8-9: Strong. Impressive depth and clarity.
        - 10: Exceptional. Could not be better.

        RULES:
        - Evaluate ONLY what the candidate said. Do not assume or infer.
        - Be honest and fair. Do not inflate scores.
        - Strengths: List 2-4 specific things the candidate did well, referencing actual answers.
        - Improvement areas: List 2-4 specific, actionable things the candidate should work on.
        - Overall feedback: Write 2-3 sentences summarizing the candidate's performance honestly.
        - Return ONLY valid JSON. No markdown, no code fences, no commentary outside the JSON.
        """
    ).strip()
    user = (
        "Evaluate this interview transcript and return ONLY the JSON result.\n\n"
        f"{transcript}\n\n"
        "Return STRICTLY this JSON format:\n"
        "{\n"
        '  "scores": {\n'
        '    "clarity": <number 1-10>,\n'
        '    "relevance": <number 1-10>,\n'
        '    "logical_reasoning": <number 1-10>,\n'
        '    "confidence": <number 1-10>,\n'
        '    "depth": <number 1-10>\n'
        "  },\n"
        '  "strengths": ["<specific strength 1>", "<specific strength 2>"],\n'
        '  "improvement_areas": ["<specific area 1>", "<specific area 2>"],\n'
        '  "overall_feedback": "<2-3 sentence summary>"\n'
        "}"
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def parse_evaluation(raw: Optional[str]) -> Optional[InterviewEvaluation]:
    """Parse evaluator output; ``None`` when the reply is unusable."""

    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        logger.warning("Interview evaluation is not JSON: %s", exc)
        return None
    scores = data.get("scores") if isinstance(data, dict) else None
    if not isinstance(scores, dict):
        return None
    for key in SCORE_KEYS:
        value = scores.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
    try:
        return InterviewEvaluation(
            scores=InterviewScores.from_raw(scores),
            strengths=_string_list(data.get("strengths")),
            improvement_areas=_string_list(data.get("improvement_areas")),
            overall_feedback=data.get("overall_feedback") if isinstance(data.get("overall_feedback"), str) else "",
        )
    except ValidationError as exc:
        logger.warning("Interview evaluation failed validation: %s", exc)
        return None


def mock_evaluation() -> InterviewEvaluation:
    return InterviewEvaluation(
        scores=InterviewScores.from_raw(
            {"clarity": 7, "relevance": 8, "logical_reasoning": 6, "confidence": 7, "depth": 5}
        ),
        strengths=[
            "Provided clear and structured explanations",
            "Stayed on topic and addressed the questions directly",
            "Demonstrated awareness of industry best practices",
        ],
        improvement_areas=[
            "Answers could include more specific technical details",
            "Consider providing concrete metrics or outcomes from past work",
            "Could ask clarifying questions before answering",
        ],
        overall_feedback=(
            "The candidate demonstrated a solid foundation and communicated clearly throughout the interview. "
            "However, several answers remained at a surface level and would benefit from deeper technical "
            "specifics and real-world examples with measurable impact."
        ),
    )


def _string_list(value: object) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()]


__all__ = [
    "InterviewEvaluation",
    "InterviewScores",
    "SCORE_KEYS",
    "build_evaluation_messages",
    "mock_evaluation",
    "parse_evaluation",
]
