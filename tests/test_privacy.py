"""
Tests for privacy flag resolution and the personalization gate.
"""

from threading import Event
from unittest.mock import MagicMock

import pytest
from flask import Flask

from recipe_ranking.exceptions import RankingCancelled
from recipe_ranking.models import FeedbackRecord, MacroGoals, PrivacySettings
from recipe_ranking.privacy import (
    DEFAULT_PRIVACY_SETTINGS,
    PrivacyGate,
    privacy_from_request,
    resolve_privacy_settings,
)


class TestResolvePrivacySettings:
    def test_defaults_when_nothing_is_sent(self):
        settings = resolve_privacy_settings()
        assert settings == DEFAULT_PRIVACY_SETTINGS
        assert settings.data_sharing_enabled is True
        assert settings.analytics_enabled is True
        assert settings.location_services_enabled is False

    @pytest.mark.parametrize("value, expected", [
        ("true", True), ("1", True), ("TRUE", True),
        ("false", False), ("0", False), ("yes", False), ("", False),
    ])
    def test_only_true_and_1_are_truthy(self, value, expected):
        settings = resolve_privacy_settings(headers={"X-Data-Sharing-Enabled": value})
        assert settings.data_sharing_enabled is expected

    def test_header_wins_over_query(self):
        settings = resolve_privacy_settings(
            headers={"x-analytics-enabled": "false"},
            query={"analyticsEnabled": "true", "locationServicesEnabled": "1"},
        )
        assert settings.analytics_enabled is False
        assert settings.location_services_enabled is True
        assert settings.data_sharing_enabled is True

    def test_settings_are_immutable(self):
        settings = resolve_privacy_settings()
        with pytest.raises(Exception):
            settings.data_sharing_enabled = False


class TestPrivacyFromRequest:
    def test_outside_request_context_uses_defaults(self):
        assert privacy_from_request() == DEFAULT_PRIVACY_SETTINGS

    def test_reads_active_flask_request(self):
        app = Flask(__name__)
        with app.test_request_context(
            "/recipes?analyticsEnabled=false",
            headers={"X-Data-Sharing-Enabled": "false"},
        ):
            settings = privacy_from_request()
        assert settings == PrivacySettings(
            data_sharing_enabled=False, analytics_enabled=False, location_services_enabled=False
        )


def _mock_stores():
    behavioral = MagicMock()
    behavioral.get_feedback.return_value = [FeedbackRecord(recipe_id="r1", liked=True)]
    behavioral.get_saved.return_value = []
    behavioral.get_meal_history.return_value = []
    preferences = MagicMock()
    preferences.get_macro_goals.return_value = MacroGoals(calories=2000, protein=150, carbs=200, fat=60)
    return behavioral, preferences


class TestPrivacyGate:
    def test_sharing_disabled_calls_no_store(self):
        behavioral, preferences = _mock_stores()
        gate = PrivacyGate(behavioral, preferences)

        decision = gate.evaluate("user-1", PrivacySettings(data_sharing_enabled=False))

        assert decision.use_personalization is False
        assert decision.profile.is_empty
        assert decision.macro_goals is None
        assert behavioral.method_calls == []
        assert preferences.method_calls == []

    def test_sharing_enabled_builds_profile(self):
        behavioral, preferences = _mock_stores()
        decision = PrivacyGate(behavioral, preferences).evaluate("user-1", DEFAULT_PRIVACY_SETTINGS)

        assert decision.use_personalization is True
        assert [e.recipe_id for e in decision.profile.liked] == ["r1"]
        assert decision.macro_goals.calories == 2000
        behavioral.get_feedback.assert_called_once_with("user-1")
        preferences.get_macro_goals.assert_called_once_with("user-1")

    def test_store_failure_degrades_to_generic(self):
        behavioral, preferences = _mock_stores()
        behavioral.get_saved.side_effect = ConnectionError("store offline")

        decision = PrivacyGate(behavioral, preferences).evaluate("user-1", DEFAULT_PRIVACY_SETTINGS)

        assert decision.use_personalization is False
        assert decision.profile.is_empty
        preferences.get_macro_goals.assert_not_called()

    def test_cancellation_is_propagated(self):
        behavioral, preferences = _mock_stores()
        cancel = Event()
        behavioral.get_feedback.side_effect = lambda uid: cancel.set() or []

        with pytest.raises(RankingCancelled):
            PrivacyGate(behavioral, preferences).evaluate("user-1", DEFAULT_PRIVACY_SETTINGS, cancel_event=cancel)
        behavioral.get_saved.assert_not_called()

    def test_user_id_hidden_when_analytics_disabled(self, caplog):
        behavioral, preferences = _mock_stores()
        settings = PrivacySettings(data_sharing_enabled=False, analytics_enabled=False)
        with caplog.at_level("INFO", logger="recipe_ranking.privacy"):
            PrivacyGate(behavioral, preferences).evaluate("secret-user", settings)
        assert "secret-user" not in caplog.text
        assert "anonymous" in caplog.text
