"""
Privacy resolution and the personalization gate.

Privacy flags travel with each request (headers first, query parameters as a
fallback) and are never stored. The gate decides whether behavioral and
preference data are fetched at all: with data sharing disabled no store is
called, so no personal data can reach the scoring path.
"""

import logging
from dataclasses import dataclass, field
from threading import Event
from typing import Any, Mapping, Optional

from flask import has_request_context
from flask import request as flask_request

from .exceptions import RankingCancelled
from .models import BehaviorProfile, MacroGoals, PrivacySettings
from .signals import build_behavior_profile
from .stores import BehavioralStore, PreferenceStore

_LOG = logging.getLogger("recipe_ranking.privacy")

DEFAULT_PRIVACY_SETTINGS = PrivacySettings(
    data_sharing_enabled=True,
    analytics_enabled=True,
    location_services_enabled=False,
)

# field name -> (header, query parameter)
PRIVACY_SIGNALS = {
    "data_sharing_enabled": ("X-Data-Sharing-Enabled", "dataSharingEnabled"),
    "analytics_enabled": ("X-Analytics-Enabled", "analyticsEnabled"),
    "location_services_enabled": ("X-Location-Services-Enabled", "locationServicesEnabled"),
}


def _lookup(mapping: Optional[Mapping[str, Any]], key: str, case_insensitive: bool = False) -> Optional[Any]:
    if not mapping:
        return None
    value = mapping.get(key)
    if value is not None or not case_insensitive:
        return value
    lowered = key.lower()
    for name, candidate in mapping.items():
        if isinstance(name, str) and name.lower() == lowered:
            return candidate
    return None


def _is_truthy(value: Any) -> bool:
    return str(value).strip().lower() in ("true", "1")


def resolve_privacy_settings(
    headers: Optional[Mapping[str, Any]] = None,
    query: Optional[Mapping[str, Any]] = None,
) -> PrivacySettings:
    """Resolve privacy flags from transport-level signals.

    Args:
        headers: Request headers (``X-Data-Sharing-Enabled`` and friends)
        query: Query parameters used when a header is absent

    Returns:
        PrivacySettings, falling back to defaults for unspecified flags
    """
    resolved = {}
    for field_name, (header, param) in PRIVACY_SIGNALS.items():
        raw = _lookup(headers, header, case_insensitive=True)
        if raw is None:
            raw = _lookup(query, param)
        resolved[field_name] = (
            _is_truthy(raw) if raw is not None else getattr(DEFAULT_PRIVACY_SETTINGS, field_name)
        )
    return PrivacySettings(**resolved)


def privacy_from_request(req=None) -> PrivacySettings:
    """Resolve privacy flags from a Flask request (the active one by default)."""
    if req is None:
        if not has_request_context():
            return DEFAULT_PRIVACY_SETTINGS
        req = flask_request
    return resolve_privacy_settings(req.headers, req.args)


@dataclass(slots=True, frozen=True)
class GateDecision:
    """Outcome of the privacy gate for one request."""

    use_personalization: bool
    profile: BehaviorProfile = field(default_factory=BehaviorProfile)
    macro_goals: Optional[MacroGoals] = None


GENERIC_DECISION = GateDecision(use_personalization=False)


def _check_cancelled(cancel_event: Optional[Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise RankingCancelled("Ranking request cancelled during fetch phase")


class PrivacyGate:
    """Fetches personalization inputs only when the request allows it."""

    def __init__(self, behavioral_store: BehavioralStore, preference_store: PreferenceStore):
        self.behavioral_store = behavioral_store
        self.preference_store = preference_store

    def evaluate(
        self,
        user_id: str,
        privacy: PrivacySettings,
        cancel_event: Optional[Event] = None,
    ) -> GateDecision:
        user_label = user_id if privacy.analytics_enabled else "anonymous"
        if not privacy.data_sharing_enabled:
            _LOG.info("Data sharing disabled - using generic ranking for user %s", user_label)
            return GENERIC_DECISION

        try:
            _check_cancelled(cancel_event)
            feedback = self.behavioral_store.get_feedback(user_id)
            _check_cancelled(cancel_event)
            saved = self.behavioral_store.get_saved(user_id)
            _check_cancelled(cancel_event)
            history = self.behavioral_store.get_meal_history(user_id)
            _check_cancelled(cancel_event)
            goals = self.preference_store.get_macro_goals(user_id)
        except RankingCancelled:
            raise
        except Exception as e:
            _LOG.warning("Personalization data unavailable for user %s, degrading to generic ranking: %s", user_label, e)
            return GENERIC_DECISION

        profile = build_behavior_profile(feedback, saved, history)
        _LOG.debug("Behavior profile for user %s: %s", user_label, profile.counts())
        return GateDecision(use_personalization=True, profile=profile, macro_goals=goals)
