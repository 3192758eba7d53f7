from __future__ import annotations  # Discussion modes and their weight profiles

import logging
from enum import Enum
from typing import Dict, NamedTuple, Optional

from .types import ModeWeights

logger = logging.getLogger(__name__)


class DiscussionMode(str, Enum):  # Closed set of scoring profiles
    DEBATE = "debate"
    CLASSROOM = "classroom"
    PANEL = "panel"
    MEETING = "meeting"

    @property
    def weights(self) -> ModeWeights:
        return _PROFILES[self].weights

    @property
    def label(self) -> str:
        return _PROFILES[self].label

    @classmethod
    def coerce(cls, value: Optional[str]) -> "DiscussionMode":
        """Map request input onto a mode; missing or unknown values become DEBATE."""

        if value is None or not str(value).strip():
            return cls.DEBATE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown discussion mode %r, using %s", value, cls.DEBATE.value)
            return cls.DEBATE


class _Profile(NamedTuple):
    label: str
    weights: ModeWeights


_PROFILES: Dict[DiscussionMode, _Profile] = {
    DiscussionMode.DEBATE: _Profile(
        "Debate Mode", ModeWeights(logic=0.35, clarity=0.20, relevance=0.30, emotional_bias=0.15)
    ),
    DiscussionMode.CLASSROOM: _Profile(
        "Classroom Discussion", ModeWeights(logic=0.20, clarity=0.35, relevance=0.35, emotional_bias=0.10)
    ),
    DiscussionMode.PANEL: _Profile(
        "Panel Interview", ModeWeights(logic=0.30, clarity=0.25, relevance=0.25, emotional_bias=0.20)
    ),
    DiscussionMode.MEETING: _Profile(
        "Team Meeting", ModeWeights(logic=0.25, clarity=0.30, relevance=0.35, emotional_bias=0.10)
    ),
}

_unmapped = set(DiscussionMode) - set(_PROFILES)
if _unmapped:
    raise RuntimeError(f"Discussion modes without a weight profile: {sorted(m.value for m in _unmapped)}")


__all__ = ["DiscussionMode"]
