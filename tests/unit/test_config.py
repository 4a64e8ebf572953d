"""
Unit tests for Settings.
"""

import pytest
from pydantic import ValidationError

from vocab_mastery.config import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.review_intervals_days == [1, 3, 7, 14, 30]
        assert settings.failure_review_hours == 4
        assert settings.review_base_xp == 10
        assert settings.speak_repeat_threshold == 0.7
        assert settings.database_url.startswith("sqlite:///")
        assert not settings.has_progress_api_configured()

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("VOCAB_MASTERY_REVIEW_BASE_XP", "20")
        monkeypatch.setenv("VOCAB_MASTERY_REVIEW_INTERVALS_DAYS", "[2, 4]")
        settings = get_settings()
        assert settings.review_base_xp == 20
        assert settings.review_intervals_days == [2, 4]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_interval_policy(self):
        policy = Settings(review_intervals_days=[1, 2], failure_review_hours=6).get_interval_policy()
        assert policy.table == (1, 2)
        assert policy.failure_offset_hours == 6

    def test_reward_policy(self):
        assert Settings(review_base_xp=15).get_reward_policy().review_base_xp == 15

    @pytest.mark.parametrize(
        "field,value",
        [("review_intervals_days", []), ("review_intervals_days", [1, 0]), ("review_base_xp", 0), ("failure_review_hours", -1)],
    )
    def test_validation(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})
