from __future__ import annotations  # Live AI collaborators for the interviewer

from pathlib import Path
from typing import Dict, Iterator, List, Sequence

from config import LlmRoute, load_config, resolve_route
from llm_gateway import complete, stream
from observability import span

from .prompts import SUMMARIZER_SYSTEM

QUESTION_KEY = "interview_session.question_generator"
SUMMARIZER_KEY = "interview_session.summarizer"
REPORT_KEY = "interview_session.report_evaluator"


class InterviewAI:
    """Question generation, summarization and report evaluation over configured routes.

    Every method raises ``LlmGatewayError`` on failure; callers decide the fallback.
    """

    def __init__(self, question_route: LlmRoute, summary_route: LlmRoute, report_route: LlmRoute) -> None:
        self.question_route = question_route
        self.summary_route = summary_route
        self.report_route = report_route

    def ask(self, messages: Sequence[Dict[str, str]]) -> str:
        with span("collaborator.question", self.question_route.name):
            return complete(messages, cfg=self.question_route)

    def ask_stream(self, messages: Sequence[Dict[str, str]]) -> Iterator[str]:
        return stream(messages, cfg=self.question_route)

    def summarize(self, request: Dict[str, str]) -> str:
        messages: List[Dict[str, str]] = [{"role": "system", "content": SUMMARIZER_SYSTEM}, request]
        with span("collaborator.summarize", self.summary_route.name):
            return complete(messages, cfg=self.summary_route)

    def evaluate(self, messages: Sequence[Dict[str, str]]) -> str:
        with span("collaborator.interview_report", self.report_route.name):
            return complete(messages, cfg=self.report_route)


def interview_ai_with_config(config_path: Path) -> InterviewAI:
    cfg = load_config(config_path)
    return InterviewAI(
        question_route=resolve_route(cfg, QUESTION_KEY),
        summary_route=resolve_route(cfg, SUMMARIZER_KEY),
        report_route=resolve_route(cfg, REPORT_KEY),
    )


__all__ = ["InterviewAI", "QUESTION_KEY", "REPORT_KEY", "SUMMARIZER_KEY", "interview_ai_with_config"]
