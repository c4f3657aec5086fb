"""Static plan tiers and the entitlements each one grants.

The table is fixed at import time. Changing what a tier grants means
changing ``PLAN_FEATURES`` and redeploying; nothing mutates it at runtime.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any

from veeloo.logging import logger

UNBOUNDED = math.inf


class PlanTier(str, Enum):
    """Subscription levels, cheapest first."""

    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ELITE = "elite"


class UserRole(str, Enum):
    MEMBER = "member"
    CREATOR = "creator"


class DiscoveryBoost(str, Enum):
    NONE = "none"
    SMALL = "small"
    LARGE = "large"
    MAXIMUM = "maximum"


@dataclass(frozen=True)
class EntitlementSet:
    """Feature flags and limits granted by a single plan tier."""

    max_messages_per_day: float
    can_send_files: bool
    can_send_images: bool
    can_unlock_exclusive: bool
    priority_inbox: bool
    hd_streaming: bool
    download_content: bool
    can_tip_creators: bool
    platform_fee: float
    can_monetize: bool
    verified_badge: bool
    discovery_boost: DiscoveryBoost

    def __post_init__(self) -> None:
        limit = self.max_messages_per_day
        if limit != UNBOUNDED and (limit <= 0 or int(limit) != limit):
            raise ValueError("max_messages_per_day must be a positive integer or UNBOUNDED")
        if not 0 <= self.platform_fee <= 1:
            raise ValueError("platform_fee must be between 0 and 1")

    @property
    def unbounded_messages(self) -> bool:
        return self.max_messages_per_day == UNBOUNDED

    def value_of(self, feature: str) -> Any:
        return getattr(self, feature)


FEATURE_NAMES: frozenset[str] = frozenset(field.name for field in fields(EntitlementSet))

PLAN_FEATURES: Mapping[PlanTier, EntitlementSet] = MappingProxyType(
    {
        PlanTier.FREE: EntitlementSet(
            max_messages_per_day=3,
            can_send_files=False,
            can_send_images=False,
            can_unlock_exclusive=False,
            priority_inbox=False,
            hd_streaming=False,
            download_content=False,
            can_tip_creators=False,
            platform_fee=0.20,
            can_monetize=False,
            verified_badge=False,
            discovery_boost=DiscoveryBoost.NONE,
        ),
        PlanTier.BASIC: EntitlementSet(
            max_messages_per_day=20,
            can_send_files=False,
            can_send_images=False,
            can_unlock_exclusive=False,
            priority_inbox=False,
            hd_streaming=True,
            download_content=False,
            can_tip_creators=True,
            platform_fee=0.15,
            can_monetize=False,
            verified_badge=False,
            discovery_boost=DiscoveryBoost.SMALL,
        ),
        PlanTier.PRO: EntitlementSet(
            max_messages_per_day=UNBOUNDED,
            can_send_files=True,
            can_send_images=True,
            can_unlock_exclusive=True,
            priority_inbox=False,
            hd_streaming=True,
            download_content=True,
            can_tip_creators=True,
            platform_fee=0.10,
            can_monetize=True,
            verified_badge=True,
            discovery_boost=DiscoveryBoost.LARGE,
        ),
        PlanTier.ELITE: EntitlementSet(
            max_messages_per_day=UNBOUNDED,
            can_send_files=True,
            can_send_images=True,
            can_unlock_exclusive=True,
            priority_inbox=True,
            hd_streaming=True,
            download_content=True,
            can_tip_creators=True,
            platform_fee=0.05,
            can_monetize=True,
            verified_badge=True,
            discovery_boost=DiscoveryBoost.MAXIMUM,
        ),
    }
)

if set(PLAN_FEATURES) != set(PlanTier):
    raise RuntimeError("PLAN_FEATURES must define every PlanTier")

# Ceiling applied to signed-in users whose plan is missing or unrecognized.
FALLBACK_TIER = PlanTier.FREE


def resolve_tier(plan: Any) -> PlanTier | None:
    """Map a stored plan value onto a ``PlanTier``; unknown values give ``None``."""

    if isinstance(plan, PlanTier):
        return plan
    if not isinstance(plan, str) or not plan:
        return None
    try:
        return PlanTier(plan)
    except ValueError:
        return None


def _field_of(user: Any, name: str) -> Any:
    if user is None:
        return None
    if isinstance(user, Mapping):
        return user.get(name)
    return getattr(user, name, None)


def _plan_of(user: Any) -> Any:
    return _field_of(user, "plan")


def user_id_of(user: Any) -> Any:
    """Return the id of a user object or mapping, ``None`` for anonymous callers."""

    return _field_of(user, "id")


def entitlements_for(user: Any) -> EntitlementSet | None:
    """Return the full entitlement record for ``user``'s plan, if any."""

    tier = resolve_tier(_plan_of(user))
    if tier is None:
        return None
    return PLAN_FEATURES[tier]


def get_plan_value(user: Any, feature: str) -> Any | None:
    """Return the raw entitlement value, or ``None`` when access cannot be established."""

    if feature not in FEATURE_NAMES:
        logger.warning("unknown_plan_feature", feature=feature)
        return None
    entitlements = entitlements_for(user)
    if entitlements is None:
        return None
    return entitlements.value_of(feature)


def has_feature(user: Any, feature: str) -> bool:
    """Return whether ``user``'s plan grants the boolean capability ``feature``."""

    return get_plan_value(user, feature) is True


def minimum_tier_for(feature: str) -> PlanTier | None:
    """Return the cheapest tier granting ``feature``, or ``None`` if no tier does."""

    if feature not in FEATURE_NAMES:
        return None
    for tier in PlanTier:
        if PLAN_FEATURES[tier].value_of(feature) is True:
            return tier
    return None


__all__ = [
    "DiscoveryBoost",
    "EntitlementSet",
    "FALLBACK_TIER",
    "FEATURE_NAMES",
    "PLAN_FEATURES",
    "PlanTier",
    "UNBOUNDED",
    "UserRole",
    "entitlements_for",
    "get_plan_value",
    "has_feature",
    "minimum_tier_for",
    "resolve_tier",
    "user_id_of",
]
