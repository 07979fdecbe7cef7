"""
Core utilities for the Orbit athlete tracker.

This package hosts shared logic so the Flask app and the scheduled
feed script can reuse the same backend integration and result formatting.
"""

from .athletes import FollowTracker, filter_athletes
from .backend import AuthError, AuthSession, BackendError, OrbitBackend
from .cards import EventCard, build_detail_card, build_feed_card
from .result_formatter import DisplayField, order_fields
from .settings import BackendConfig

__all__ = [
    "AuthError",
    "AuthSession",
    "BackendConfig",
    "BackendError",
    "DisplayField",
    "EventCard",
    "FollowTracker",
    "OrbitBackend",
    "build_detail_card",
    "build_feed_card",
    "filter_athletes",
    "order_fields",
]
