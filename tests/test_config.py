"""Tests for environment-driven settings."""


def test_defaults(settings):
    assert settings.log_level == "INFO"
    assert settings.brain_ddx_limit == 6
    assert settings.pancreas_ddx_limit(True) == 14
    assert settings.pancreas_ddx_limit(False) == 8
    assert settings.narrative_recommendation_limit(True) == 5
    assert settings.narrative_recommendation_limit(False) == 3


def test_env_override(monkeypatch):
    from radclean.config import Settings

    monkeypatch.setenv("RADCLEAN_BRAIN_DDX_LIMIT", "3")
    monkeypatch.setenv("RADCLEAN_LOG_LEVEL", "DEBUG")
    s = Settings(_env_file=None)
    assert s.brain_ddx_limit == 3
    assert s.log_level == "DEBUG"


def test_env_override_reaches_derivation(monkeypatch):
    from radclean.brain.report import derive
    from radclean.brain.state import BrainState
    from radclean.config import Settings

    monkeypatch.setenv("RADCLEAN_BRAIN_DDX_LIMIT", "1")
    state = BrainState(cvst_suspected=True)
    result = derive(state, Settings(_env_file=None))
    assert len(result.differentials) == 1
