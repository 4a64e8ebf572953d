"""Reward Calculator: XP and badge-eligible session events."""

from .calculator import (
    DEFAULT_REWARD_POLICY,
    RewardPolicy,
    accuracy_percent,
    badge_events,
    compute_xp,
)

__all__ = [
    "RewardPolicy",
    "DEFAULT_REWARD_POLICY",
    "compute_xp",
    "accuracy_percent",
    "badge_events",
]
