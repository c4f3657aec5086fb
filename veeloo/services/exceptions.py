"""Domain-specific exceptions."""

from __future__ import annotations


class ServiceError(Exception):
    pass


class FeatureLocked(ServiceError):
    """Raised when the user's plan does not grant a capability."""

    def __init__(self, feature: str, required_tier: str | None = None) -> None:
        self.feature = feature
        self.required_tier = required_tier
        hint = f" (requires {required_tier})" if required_tier else ""
        super().__init__(f"Feature '{feature}' is locked{hint}.")


class QuotaExceeded(ServiceError):
    pass


class UsageStoreUnavailable(ServiceError):
    """The usage counter could not be read or written; the action is unconfirmed."""


class RecipientNotFound(ServiceError):
    pass
