"""Interviewer prompt text and the deterministic mock interviewer."""
from __future__ import annotations

from textwrap import dedent
from typing import List, Optional

from .models import InterviewDifficulty, InterviewFocus

OPENING_INSTRUCTION = "Please begin the interview with your first question."

SUMMARIZER_SYSTEM = "You are a concise summarizer. Respond with only the summary."

FOCUS_GUIDELINES = {
    InterviewFocus.TECHNICAL: (
        "- Ask about system design, algorithms, data structures, debugging, and domain-specific technical concepts.\n"
        "- Include at least one coding-related or architecture question.\n"
        '- Ask "how would you implement..." or "walk me through..." style questions.'
    ),
    InterviewFocus.BEHAVIORAL: (
        "- Use the STAR method framework (Situation, Task, Action, Result).\n"
        "- Ask about teamwork, conflict resolution, leadership, and past experiences.\n"
        '- Frame questions as "Tell me about a time when..." or "Describe a situation where..."'
    ),
    InterviewFocus.HR: (
        "- Focus on cultural fit, salary expectations, career goals, and work-life balance.\n"
        "- Ask about motivation for applying, strengths/weaknesses, and availability.\n"
        "- Keep questions open-ended and conversational."
    ),
    InterviewFocus.MIXED: (
        "- Blend technical, behavioral, and HR-style questions evenly.\n"
        "- Start with HR/intro, move to technical, then behavioral, and close with a forward-looking question.\n"
        "- Ensure variety; do not cluster similar question types together."
    ),
}

DIFFICULTY_GUIDELINES = {
    InterviewDifficulty.EASY: (
        "- Ask straightforward, foundational questions.\n"
        "- Avoid deep system design or ambiguous scenarios.\n"
        "- Suitable for entry-level or intern candidates."
    ),
    InterviewDifficulty.MEDIUM: (
        "- Ask questions that require some depth and practical experience.\n"
        "- Include one scenario-based or problem-solving question.\n"
        "- Suitable for mid-level professionals with 2-5 years of experience."
    ),
    InterviewDifficulty.HARD: (
        "- Ask complex, multi-layered questions that test deep expertise.\n"
        "- Include trade-off analysis, edge-case handling, and leadership under pressure.\n"
        "- Suitable for senior-level or staff-level candidates."
    ),
}

MOCK_QUESTIONS: List[str] = [
    "Can you walk me through a challenging project you worked on recently?",
    "How do you approach debugging a complex system issue?",
    "Tell me about a time you had to learn something new under a tight deadline.",
    "What's your approach to code reviews and giving constructive feedback?",
    "How do you prioritize tasks when working on multiple features?",
    "Describe a situation where you disagreed with a team decision. How did you handle it?",
    "Where do you see your career heading in the next few years?",
    "Is there anything you'd like to ask me or add before we wrap up?",
]


def build_system_prompt(role: str, focus: InterviewFocus, difficulty: InterviewDifficulty) -> str:
    rules = dedent(
        """
        RULES (follow strictly):
        1. Ask exactly ONE question at a time. Never ask multiple questions in a single response.
        2. Keep each question to 1-2 sentences maximum. No long introductions or monologues.
        3. Do NOT provide feedback on the candidate's answers during the interview.
        4. Do NOT reveal correct answers or coach the candidate.
        5. Maintain a calm, professional, and neutral tone throughout.
        6. The entire interview must not exceed 8 questions total.
        7. Slightly adapt your follow-up questions based on what the candidate said, but stay within the focus area.
        8. Do NOT say things like "Great answer" or "That's correct". Simply move to the next question.
        9. If the candidate gives a vague or off-topic answer, gently redirect with a more specific follow-up.
        """
    ).strip()
    flow = dedent(
        """
        INTERVIEW FLOW:
        - Question 1: Start with an introductory question (e.g., brief background or motivation for the role).
        - Questions 2-6: Core questions matching the focus area and difficulty.
        - Question 7: A situational or scenario-based question.
        - Question 8: A closing question (e.g., "Is there anything you'd like to add?" or a forward-looking question).

        RESPONSE FORMAT:
        - Respond with ONLY the next interview question.
        - No labels, no numbering, no prefixes like "Question 3:".
        - Just the plain question text, concise and direct.
        """
    ).strip()
    return "\n\n".join(
        [
            f"You are a professional interviewer conducting a structured interview for the role of **{role}**.",
            f"INTERVIEW PARAMETERS:\n- Focus Area: {focus.value}\n- Difficulty Level: {difficulty.value}",
            rules,
            f"QUESTION STYLE BY FOCUS:\n{FOCUS_GUIDELINES[focus]}",
            f"DIFFICULTY CALIBRATION:\n{DIFFICULTY_GUIDELINES[difficulty]}",
            flow,
        ]
    )


def mock_question(number: int, role: str) -> str:
    """Deterministic question for the 1-based question ``number``."""

    if number <= 1:
        return (
            f"Welcome! I'll be your interviewer for the {role} role today. "
            "Tell me a little about yourself and what draws you to this position."
        )
    return MOCK_QUESTIONS[min(number - 1, len(MOCK_QUESTIONS) - 1)]


def mock_summary(answers: List[str], previous: Optional[str] = None, limit: int = 400) -> str:
    """Deterministic stand-in for the summarizer; output never exceeds ``limit`` characters."""

    points = "; ".join(" ".join(a.split()[:12]) for a in answers if a.strip())
    text = f"Candidate discussed: {points}." if points else "No candidate answers in the earlier exchanges."
    if previous:
        text = f"{previous} {text}"
    return text if len(text) <= limit else text[-limit:].lstrip()


__all__ = [
    "DIFFICULTY_GUIDELINES",
    "FOCUS_GUIDELINES",
    "MOCK_QUESTIONS",
    "OPENING_INSTRUCTION",
    "SUMMARIZER_SYSTEM",
    "build_system_prompt",
    "mock_question",
    "mock_summary",
]
