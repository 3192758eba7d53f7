import pytest

from api.deps import CONFIG_PATH
from config import load_config, resolve_route
from config.settings import Settings
from evaluation import EVALUATOR_KEY
from interview_session.collaborators import QUESTION_KEY, REPORT_KEY, SUMMARIZER_KEY
from speech import TRANSCRIBER_KEY, TTS_KEY


def test_settings_defaults(monkeypatch):
    for name in ("DB_PATH", "AI_MODE", "OPENAI_API_KEY", "PERSISTENCE_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.PERSISTENCE_ENABLED is True
    assert settings.DEFAULT_TIME_LIMIT == 30
    assert settings.AI_MODE == "auto"


@pytest.mark.parametrize(
    "mode,key,expected",
    [
        ("mock", "sk-real", False),
        ("live", "", True),
        ("auto", "", False),
        ("auto", "sk_your_key_here", False),
        ("auto", "sk-real", True),
    ],
)
def test_ai_enabled_switch(mode, key, expected):
    settings = Settings(_env_file=None, AI_MODE=mode, OPENAI_API_KEY=key)
    assert settings.ai_enabled is expected


def test_every_collaborator_has_a_route():
    cfg = load_config(CONFIG_PATH)
    for key in (EVALUATOR_KEY, QUESTION_KEY, SUMMARIZER_KEY, REPORT_KEY, TRANSCRIBER_KEY, TTS_KEY):
        route = resolve_route(cfg, key)
        assert route.base_url.startswith("https://")
    assert resolve_route(cfg, TTS_KEY).voice == "nova"
    assert resolve_route(cfg, QUESTION_KEY).enforce_json is False


def test_missing_registry_entry_raises():
    cfg = load_config(CONFIG_PATH)
    with pytest.raises(KeyError):
        resolve_route(cfg, "unknown.collaborator")
