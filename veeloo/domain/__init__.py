from veeloo.domain.models import DENIED, UsageDecision, UsageSnapshot
from veeloo.domain.plans import (
    PLAN_FEATURES,
    UNBOUNDED,
    DiscoveryBoost,
    EntitlementSet,
    PlanTier,
    UserRole,
    entitlements_for,
    get_plan_value,
    has_feature,
    minimum_tier_for,
    resolve_tier,
    user_id_of,
)

__all__ = [
    "DENIED",
    "PLAN_FEATURES",
    "UNBOUNDED",
    "DiscoveryBoost",
    "EntitlementSet",
    "PlanTier",
    "UsageDecision",
    "UsageSnapshot",
    "UserRole",
    "entitlements_for",
    "get_plan_value",
    "has_feature",
    "minimum_tier_for",
    "resolve_tier",
    "user_id_of",
]
