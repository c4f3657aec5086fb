"""Guards that turn entitlement lookups into hard failures."""

from __future__ import annotations

from typing import Any

from veeloo.domain.plans import has_feature, minimum_tier_for
from veeloo.logging import logger
from veeloo.services.exceptions import FeatureLocked


def require_feature(user: Any, feature: str) -> None:
    """Raise :class:`FeatureLocked` unless ``user``'s plan grants ``feature``."""

    if has_feature(user, feature):
        return
    required = minimum_tier_for(feature)
    logger.info(
        "feature_locked",
        user_id=getattr(user, "id", None),
        feature=feature,
        required_tier=required.value if required else None,
    )
    raise FeatureLocked(feature, required.value if required else None)


__all__ = ["require_feature"]
